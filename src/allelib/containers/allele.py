"""Alleles: loci carrying a symbol sequence and a lesion, with crossover, merge and hard-clip operations."""
from typing import Union, Final
from enum import IntEnum, auto

import numpy as np

from allelib.core.alphabet import Alphabet, AlphabetError
from allelib.core.interval import Locus
from allelib.core.seq import Seq
from allelib.utils.resources import RESOURCES


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class AlleleError(Exception):
    """Raised when an allele cannot be built, or a clip cannot be applied to it."""


# Classes --------------------------------------------------------------------------------------------------------------
class Lesion(IntEnum):
    """
    Classification of the genomic alteration an allele represents.

    Examples:
        >>> Lesion.classify('A', 'AT')
        <Lesion.INSERTION: 4>
    """
    UNKNOWN = auto()
    MATCH = auto()
    SUBSTITUTION = auto()
    INSERTION = auto()
    DELETION = auto()

    @classmethod
    def classify(cls, reference: Union[Seq, str, bytes], alternate: Union[Seq, str, bytes]) -> 'Lesion':
        """Classifies the change from *reference* to *alternate* by length, then by identity."""
        reference, alternate = Alphabet.DNA.seq(reference), Alphabet.DNA.seq(alternate)
        if len(alternate) > len(reference): return cls.INSERTION
        if len(alternate) < len(reference): return cls.DELETION
        if alternate == reference: return cls.MATCH
        return cls.SUBSTITUTION


class Allele:
    """
    An immutable locus paired with a symbol sequence and a ``Lesion``.

    The sequence spans the locus exactly. An allele built without a sequence holds the single gap symbol ``-`` as a
    placeholder (or nothing if the locus is empty); ``symbols`` always spreads the sequence over the whole locus.
    All operations return new alleles.

    Args:
        locus: Location of the allele.
        sequence: Symbols covering the locus (optional).
        lesion: The lesion classification (default ``UNKNOWN``).
        id: Optional label.

    Raises:
        AlleleError: If the sequence does not fit the locus or contains unknown symbols.

    Examples:
        >>> a = Allele.build('chr6', 5, 15, 'CCCCCAAAAA')
        >>> b = Allele.build('chr6', 10, 20, 'AAAAATTTTT')
        >>> str(a.merge(b).sequence)
        'CCCCCAAAAATTTTT'
    """
    __slots__ = ('_id', '_locus', '_sequence', '_lesion')
    ALPHABET: Final = Alphabet.DNA

    def __init__(self, locus: Locus, sequence: Union[Seq, str, bytes] = None, lesion: Lesion = Lesion.UNKNOWN,
                 id: str = None):
        if locus.start < 0: raise AlleleError(f'Allele cannot start before 0: {locus}')
        width = len(locus)
        if sequence is None:
            sequence = self.ALPHABET.gaps(1) if width else self.ALPHABET.empty_seq()
        else:
            try: sequence = self.ALPHABET.seq(sequence)
            except AlphabetError as e: raise AlleleError(f'Cannot build allele at {locus}: {e}') from e
            if len(sequence) != width:
                raise AlleleError(f'Sequence length {len(sequence)} does not match the width {width} of {locus}')
        try: lesion = Lesion.UNKNOWN if lesion is None else Lesion(lesion)
        except ValueError as e: raise AlleleError(f'Unknown lesion {lesion!r}') from e
        self._locus = locus
        self._sequence = sequence
        self._lesion = lesion
        self._id = id

    @classmethod
    def build(cls, contig: str, start: int, end: int, sequence: Union[Seq, str, bytes] = None, id: str = None,
              lesion: Lesion = Lesion.UNKNOWN) -> 'Allele':
        """
        Validates coordinates and builds an allele.

        Args:
            contig: Contig name, must not be empty.
            start: Start position, ``0 <= start <= end``.
            end: End position (exclusive).
            sequence: Symbols covering ``end - start`` positions (optional). An empty sequence only fits an empty
                locus.
            id: Optional label.
            lesion: The lesion classification, ``None`` meaning ``UNKNOWN``.

        Returns:
            A new ``Allele``.

        Raises:
            AlleleError: If any argument is invalid. No allele is created.
        """
        if not contig: raise AlleleError('Allele contig must not be empty')
        if not 0 <= start <= end: raise AlleleError(f'Invalid allele coordinates {start}-{end}')
        return cls(Locus(contig, start, end), sequence, lesion, id)

    @classmethod
    def empty(cls, contig: str) -> 'Allele':
        """Returns the empty allele used to signal that no result exists."""
        return cls(Locus(contig, 0, 0))

    @classmethod
    def random(cls, rng: np.random.Generator = None, contig: str = 'chr1', min_len: int = 1, max_len: int = 50,
               max_start: int = 100, lesion: Lesion = Lesion.UNKNOWN) -> 'Allele':
        """Generates a random, fully sequenced allele."""
        if rng is None: rng = RESOURCES.rng
        locus = Locus.random(rng, contig, min_len=min_len, max_len=max_len, max_start=max_start)
        return cls(locus, cls.ALPHABET.random_seq(rng, length=len(locus)), lesion)

    @property
    def id(self) -> Union[str, None]: return self._id
    @property
    def locus(self) -> Locus: return self._locus
    @property
    def contig(self) -> str: return self._locus.contig
    @property
    def start(self) -> int: return self._locus.start
    @property
    def end(self) -> int: return self._locus.end
    @property
    def sequence(self) -> Seq: return self._sequence
    @property
    def lesion(self) -> Lesion: return self._lesion
    @property
    def is_empty(self) -> bool: return self._locus.is_empty
    def __len__(self): return len(self._locus)

    @property
    def symbols(self) -> Seq:
        """Returns the sequence spread over the whole locus (the placeholder becomes a run of gaps)."""
        if len(self._sequence) == len(self._locus): return self._sequence
        return self.ALPHABET.new_seq(self._expanded())

    def symbol_at(self, position: int) -> str:
        """Returns the symbol at genomic *position*.

        Raises:
            IndexError: If the position is outside the locus.
        """
        if position not in self._locus: raise IndexError(f'Position {position} is outside {self._locus}')
        return str(self.symbols[position - self.start])

    def with_id(self, id: str) -> 'Allele':
        return Allele(self._locus, self._sequence, self._lesion, id)

    def __repr__(self):
        return f"Allele({self._locus}, {self._sequence!r}, {self._lesion.name})"

    def __eq__(self, other):
        if self is other: return True
        if not isinstance(other, Allele): return False
        return self._locus == other._locus and self._lesion == other._lesion and self.symbols == other.symbols

    def __hash__(self):
        return hash((self._locus, self._lesion, self.symbols))

    def double_crossover(self, other: 'Allele') -> 'Allele':
        """
        Splices the symbols of *other* into this allele where the two overlap.

        Positions of this locus inside the overlap take the symbol of *other* at the same genomic position; all
        other positions are gaps.

        Args:
            other: The donor allele.

        Returns:
            A new allele over this locus, with an ``UNKNOWN`` lesion. All gaps if the alleles do not overlap.

        Examples:
            >>> str(Allele.build('chr6', 5, 20).double_crossover(Allele.build('chr6', 10, 15, 'AAAAA')).sequence)
            '-----AAAAA-----'
        """
        data = np.full(len(self), self.ALPHABET.gap, dtype=Alphabet.DTYPE)
        overlap = self._locus.intersection(other._locus)
        if not overlap.is_empty:
            data[overlap.start - self.start:overlap.end - self.start] = \
                other._expanded()[overlap.start - other.start:overlap.end - other.start]
        return Allele(self._locus, self.ALPHABET.new_seq(data), Lesion.UNKNOWN, self._id)

    def merge(self, other: 'Allele', tolerance: int = 0) -> 'Allele':
        """
        Combines two alleles into one spanning both loci.

        Where both alleles cover a position, the symbol of the allele whose locus comes first wins (ordered by
        start, then end, then symbols), so the result does not depend on which allele is the receiver. Positions
        between non-overlapping alleles are gaps.

        Args:
            other: The allele to merge with.
            tolerance: Largest number of uncovered positions allowed between the two loci.

        Returns:
            The merged allele, or an empty allele if the loci are more than *tolerance* positions apart. The lesion
            is kept only if both alleles agree on it.
        """
        if self._locus.distance(other._locus) > tolerance: return Allele.empty(self.contig)
        first, second = sorted((self, other), key=Allele._precedence)
        hull = first._locus.hull(second._locus)
        data = np.full(len(hull), self.ALPHABET.gap, dtype=Alphabet.DTYPE)
        for allele in (second, first):
            data[allele.start - hull.start:allele.end - hull.start] = allele._expanded()
        lesion = self._lesion if self._lesion == other._lesion else Lesion.UNKNOWN
        return Allele(hull, self.ALPHABET.new_seq(data), lesion, first._id)

    def left_hard_clip(self, bases: Union[Seq, str, bytes]) -> 'Allele':
        """
        Removes *bases* from the start of the allele, moving the start right by the number of removed symbols.

        The clip is first matched literally and removed for as long as it keeps matching, so ``AA`` clips four
        symbols from ``AAAAATTTTT``. If it is not a prefix at all, the clip is read right-aligned against the
        start of the allele and the longest of its suffixes that the sequence begins with is removed.

        Args:
            bases: The symbols to clip (case-insensitive).

        Returns:
            The clipped allele, keeping lesion and id.

        Raises:
            AlleleError: If the clip is empty, longer than the allele, or matches by neither strategy.
        """
        clip = self._clip_pattern(bases)
        data, k = self._expanded(), len(clip)
        n = 0
        while n + k <= len(data) and np.array_equal(data[n:n + k], clip): n += k
        if not n: n = next((m for m in range(k - 1, 0, -1) if np.array_equal(clip[k - m:], data[:m])), 0)
        if not n: raise AlleleError(f'Cannot clip {self.ALPHABET.decode(clip)!r} from the left of {self!r}')
        return Allele(Locus(self.contig, self.start + n, self.end), self.ALPHABET.new_seq(data[n:]),
                      self._lesion, self._id)

    def right_hard_clip(self, bases: Union[Seq, str, bytes]) -> 'Allele':
        """
        Removes *bases* from the end of the allele, moving the end left by the number of removed symbols.

        Mirrors ``left_hard_clip``: repeated literal suffix matches first, then the longest prefix of the clip that
        the sequence ends with.

        Raises:
            AlleleError: If the clip is empty, longer than the allele, or matches by neither strategy.
        """
        clip = self._clip_pattern(bases)
        data, k = self._expanded(), len(clip)
        n = 0
        while n + k <= len(data) and np.array_equal(data[len(data) - n - k:len(data) - n], clip): n += k
        if not n: n = next((m for m in range(k - 1, 0, -1) if np.array_equal(clip[:m], data[len(data) - m:])), 0)
        if not n: raise AlleleError(f'Cannot clip {self.ALPHABET.decode(clip)!r} from the right of {self!r}')
        return Allele(Locus(self.contig, self.start, self.end - n), self.ALPHABET.new_seq(data[:len(data) - n]),
                      self._lesion, self._id)

    def _clip_pattern(self, bases: Union[Seq, str, bytes]) -> np.ndarray:
        try: clip = self.ALPHABET.seq(bases).encoded
        except AlphabetError as e: raise AlleleError(f'Invalid clip sequence: {e}') from e
        if not len(clip): raise AlleleError('Clip sequence must not be empty')
        if len(clip) > len(self):
            raise AlleleError(f'Clip sequence of length {len(clip)} is longer than {self!r}')
        return clip

    def _expanded(self) -> np.ndarray:
        if len(self._sequence) == len(self._locus): return self._sequence.encoded
        return np.full(len(self._locus), self.ALPHABET.gap, dtype=Alphabet.DTYPE)

    def _precedence(self) -> tuple:
        return self.start, self.end, self.contig, bytes(self.symbols)
