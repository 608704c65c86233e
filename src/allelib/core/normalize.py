"""
Indel normalization: sliding an inserted or deleted pattern to its leftmost or rightmost equivalent position.

Positions follow the VCF convention: *position* is the 0-based index in the reference of the base immediately
preceding the inserted or deleted pattern. Symbols are compared case-insensitively.

Examples:
    >>> reference = 'cgacgccgcgagtccgagagaggagccgcgggcgccgtggatagagc'
    >>> push_left(19, 'ag', reference), push_right(19, 'ag', reference)
    (14, 21)
"""
from typing import Union

import numpy as np

from allelib.core.alphabet import Alphabet
from allelib.core.seq import Seq
from allelib.utils.resources import jit


# Functions ------------------------------------------------------------------------------------------------------------
def shift_left(position: int, bases: Union[Seq, str, bytes],
               reference: Union[Seq, str, bytes]) -> tuple[int, Seq]:
    """
    Slides an indel event left for as long as the result is unchanged.

    A step is taken while the reference base at *position* equals the last base of the event; the event is then
    rotated right-to-left by one base. Sliding stops at the start of the reference.

    Args:
        position: Index of the reference base preceding the event.
        bases: The inserted or deleted bases.
        reference: The reference sequence.

    Returns:
        The leftmost position and the event bases as they read at that position. Feeding both back in returns
        them unchanged.
    """
    pattern = _encode(bases)
    position, offset = _push_left_kernel(_encode(reference), int(position), pattern)
    return int(position), _rotate(pattern, offset)


def shift_right(position: int, bases: Union[Seq, str, bytes],
                reference: Union[Seq, str, bytes]) -> tuple[int, Seq]:
    """
    Slides an indel event right for as long as the result is unchanged.

    A step is taken while the reference base at ``position + 1`` equals the first base of the event; the event is
    then rotated left-to-right by one base. Sliding stops at the end of the reference.

    Args:
        position: Index of the reference base preceding the event.
        bases: The inserted or deleted bases.
        reference: The reference sequence.

    Returns:
        The rightmost position and the event bases as they read at that position.
    """
    pattern = _encode(bases)
    position, offset = _push_right_kernel(_encode(reference), int(position), pattern)
    return int(position), _rotate(pattern, offset)


def push_left(position: int, bases: Union[Seq, str, bytes], reference: Union[Seq, str, bytes]) -> int:
    """Returns the leftmost position at which the indel *bases* is equivalent. See ``shift_left``."""
    return shift_left(position, bases, reference)[0]


def push_right(position: int, bases: Union[Seq, str, bytes], reference: Union[Seq, str, bytes]) -> int:
    """Returns the rightmost position at which the indel *bases* is equivalent. See ``shift_right``."""
    return shift_right(position, bases, reference)[0]


def _encode(data: Union[Seq, str, bytes]) -> np.ndarray:
    return Alphabet.DNA.seq(data).encoded


def _rotate(pattern: np.ndarray, offset: int) -> Seq:
    if not offset: return Alphabet.DNA.new_seq(pattern)
    return Alphabet.DNA.new_seq(np.concatenate((pattern[offset:], pattern[:offset])))


# Kernels --------------------------------------------------------------------------------------------------------------
@jit(nopython=True, cache=True, nogil=True)
def _push_left_kernel(reference, position, pattern):
    # The rotated event reads pattern[offset:] + pattern[:offset]
    n, k = len(reference), len(pattern)
    offset = 0
    while k > 0 and 0 <= position < n and reference[position] == pattern[(offset - 1) % k]:
        offset = (offset - 1) % k
        position -= 1
    return position, offset


@jit(nopython=True, cache=True, nogil=True)
def _push_right_kernel(reference, position, pattern):
    n, k = len(reference), len(pattern)
    offset = 0
    while k > 0 and 0 <= position + 1 < n and reference[position + 1] == pattern[offset]:
        offset = (offset + 1) % k
        position += 1
    return position, offset
