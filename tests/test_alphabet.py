import numpy as np
import pytest
from allelib.core.alphabet import Alphabet, AlphabetError


class TestAlphabetInit:
    def test_valid_init(self):
        alpha = Alphabet(b'ACGT')
        assert len(alpha) == 4
        assert b'A' in alpha
        assert 'a' in alpha
        assert b'Z' not in alpha
        assert alpha.gap is None

    def test_init_invalid_ascii(self):
        with pytest.raises(AlphabetError, match="valid ASCII"):
            Alphabet(b'ACG\xff')

    def test_init_duplicates(self):
        with pytest.raises(AlphabetError, match="duplicate"):
            Alphabet(b'AACGT')

    def test_gap_must_be_a_symbol(self):
        with pytest.raises(AlphabetError, match="Gap symbol"):
            Alphabet(b'ACGT', gap=b'-')

    def test_dna(self):
        assert len(Alphabet.DNA) == 5
        assert Alphabet.DNA.gap == 4
        assert '-' in Alphabet.DNA
        assert 'N' not in Alphabet.DNA

    def test_equality(self):
        assert Alphabet(b'ACGT-', gap=b'-') == Alphabet.DNA
        assert Alphabet(b'ACGT-') != Alphabet.DNA
        assert hash(Alphabet(b'ACGT-', gap=b'-')) == hash(Alphabet.DNA)


class TestAlphabetEncoding:
    def test_encode(self):
        np.testing.assert_array_equal(Alphabet.DNA.encode(b'ACGT-'), [0, 1, 2, 3, 4])

    def test_encode_is_case_insensitive(self):
        np.testing.assert_array_equal(Alphabet.DNA.encode('acgt'), [0, 1, 2, 3])

    def test_decode_uses_declared_case(self):
        assert Alphabet.DNA.decode(Alphabet.DNA.encode('acg-')) == b'ACG-'

    def test_encode_invalid_chars(self):
        # Unlike a lenient translation, unknown symbols are never dropped
        with pytest.raises(AlphabetError, match="'N' at index 2"):
            Alphabet.DNA.encode('ACNGT')

    def test_encode_non_ascii(self):
        with pytest.raises(AlphabetError, match="not ASCII"):
            Alphabet.DNA.encode('ACé')


class TestAlphabetFactories:
    def test_seq_from_text(self):
        assert str(Alphabet.DNA.seq('acg-t')) == 'ACG-T'
        assert str(Alphabet.DNA.seq(b'ACGT')) == 'ACGT'

    def test_seq_passthrough(self):
        seq = Alphabet.DNA.seq('ACGT')
        assert Alphabet.DNA.seq(seq) is seq

    def test_seq_other_alphabet(self):
        seq = Alphabet(b'ACGT').seq('ACGT')
        with pytest.raises(AlphabetError, match="different alphabet"):
            Alphabet.DNA.seq(seq)

    def test_seq_from_array_copies(self):
        data = np.array([0, 1], dtype=np.uint8)
        seq = Alphabet.DNA.seq(data)
        data[0] = 3
        assert str(seq) == 'AC'

    def test_seq_from_array_out_of_range(self):
        with pytest.raises(AlphabetError, match="out of range"):
            Alphabet.DNA.seq(np.array([0, 9], dtype=np.uint8))

    def test_gaps(self):
        assert str(Alphabet.DNA.gaps(3)) == '---'
        assert len(Alphabet.DNA.gaps(0)) == 0

    def test_gaps_without_gap_symbol(self):
        with pytest.raises(AlphabetError, match="no gap symbol"):
            Alphabet(b'ACGT').gaps(1)

    def test_empty_seq(self):
        assert len(Alphabet.DNA.empty_seq()) == 0

    def test_random_seq(self):
        rng = np.random.default_rng(7)
        seq = Alphabet.DNA.random_seq(rng, length=200)
        assert len(seq) == 200
        assert seq.count('-') == 0
        assert Alphabet.DNA.random_seq(rng, length=200, gapped=True).alphabet is Alphabet.DNA
