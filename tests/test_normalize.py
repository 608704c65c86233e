import numpy as np
import pytest
from allelib.core.alphabet import Alphabet, AlphabetError
from allelib.core.normalize import push_left, push_right, shift_left, shift_right

REFERENCE = 'cgacgccgcgagtccgagagaggagccgcgggcgccgtggatagagc'


class TestPushRight:
    @pytest.mark.parametrize('position, bases, reference, expected', [
        (19, 'ag', REFERENCE, 21),
        (14, 'ga', REFERENCE, 21),
        (20, 'gg', REFERENCE, 22),
        (21, 'gag', REFERENCE, 24),
        (18, 'gag', REFERENCE, 24),
        (1, 'CCTCCA', 'AGCCCCAA', 3),
    ])
    def test_push_right(self, position, bases, reference, expected):
        assert push_right(position, bases, reference) == expected

    def test_stops_at_reference_end(self):
        assert push_right(len(REFERENCE) - 1, 'c', REFERENCE) == len(REFERENCE) - 1
        assert push_right(-1, 'AC', 'ACAC') == 3
        assert push_right(100, 'ag', REFERENCE) == 100

    def test_empty_bases(self):
        assert push_right(5, '', REFERENCE) == 5

    def test_seq_arguments(self):
        assert push_right(19, Alphabet.DNA.seq('AG'), Alphabet.DNA.seq(REFERENCE)) == 21


class TestPushLeft:
    @pytest.mark.parametrize('position, bases, reference, expected', [
        (19, 'ag', REFERENCE, 14),
        (14, 'ga', REFERENCE, 14),
        (21, 'ga', REFERENCE, 21),
        (21, 'gag', REFERENCE, 18),
        (18, 'gag', REFERENCE, 18),
        (3, 'TCCACC', 'AGCCCCAA', 1),
    ])
    def test_push_left(self, position, bases, reference, expected):
        assert push_left(position, bases, reference) == expected

    def test_stops_at_reference_start(self):
        # Equivalent to inserting before the first base
        assert push_left(3, 'AC', 'ACAC') == -1
        assert push_left(-1, 'AC', 'ACAC') == -1

    def test_case_insensitive(self):
        assert push_left(19, 'AG', REFERENCE.upper()) == push_left(19, 'ag', REFERENCE) == 14

    def test_invalid_symbols(self):
        with pytest.raises(AlphabetError):
            push_left(1, 'NN', REFERENCE)


class TestShift:
    def test_shift_returns_rotated_bases(self):
        position, bases = shift_right(19, 'ag', REFERENCE)
        assert position == 21 and str(bases) == 'AG'
        position, bases = shift_right(14, 'ga', REFERENCE)
        assert position == 21 and str(bases) == 'AG'
        position, bases = shift_left(21, 'gag', REFERENCE)
        assert position == 18 and str(bases) == 'GAG'
        position, bases = shift_left(19, 'ag', REFERENCE)
        assert position == 14 and str(bases) == 'GA'

    def test_idempotent_on_normalized_event(self):
        rng = np.random.default_rng(11)
        for _ in range(200):
            reference = Alphabet.DNA.random_seq(rng, length=60)
            bases = Alphabet.DNA.random_seq(rng, length=int(rng.integers(1, 4)))
            position = int(rng.integers(0, 60))
            right = shift_right(position, bases, reference)
            assert shift_right(*right, reference) == right
            left = shift_left(position, bases, reference)
            assert shift_left(*left, reference) == left

    def test_idempotent_on_repeats(self):
        rng = np.random.default_rng(5)
        for _ in range(200):
            reference = Alphabet.DNA.random_seq(rng, length=60)
            bases = str(Alphabet.DNA.random_seq(rng, length=1)) * int(rng.integers(1, 4))
            position = int(rng.integers(0, 60))
            once = push_right(position, bases, reference)
            assert push_right(once, bases, reference) == once
            once = push_left(position, bases, reference)
            assert push_left(once, bases, reference) == once
