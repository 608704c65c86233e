"""Genomic loci: half-open intervals on a named contig, plus a batched overlap index."""
import re
from typing import Union, Iterable

import numpy as np

from allelib.containers import Batch
from allelib.core.normalize import push_left, push_right
from allelib.utils.resources import RESOURCES, jit


# Classes --------------------------------------------------------------------------------------------------------------
class Locus:
    """
    Immutable genomic interval ``[start, end)`` on a named contig. Safe for hashing and use in sets/dicts.

    Loci order by ``(contig, start, end)``. A locus with ``start == end`` is empty.

    Attributes:
        contig: The contig (chromosome or reference) name.
        start: The start position (inclusive).
        end: The end position (exclusive).

    Examples:
        >>> Locus('chr6', 5, 20).intersection(Locus('chr6', 10, 15))
        chr6:10-15
    """
    __slots__ = ('_contig', '_start', '_end')
    _REGION = re.compile(r'^(?P<contig>.+):(?P<start>[0-9,]+)-(?P<end>[0-9,]+)$')

    push_left = staticmethod(push_left)
    push_right = staticmethod(push_right)

    def __init__(self, contig: str, start: int, end: int):
        """
        Initializes a Locus.

        Raises:
            ValueError: If the contig is empty or start is after end.
        """
        if not contig: raise ValueError("Locus contig must not be empty")
        self._contig: str = str(contig)
        self._start: int = int(start)
        self._end: int = int(end)
        if self._start > self._end: raise ValueError(f"Locus start {self._start} is after end {self._end}")

    @property
    def contig(self) -> str: return self._contig
    @property
    def start(self) -> int: return self._start
    @property
    def end(self) -> int: return self._end
    @property
    def is_empty(self) -> bool: return self._start == self._end
    def __hash__(self): return hash((self._contig, self._start, self._end))
    def __repr__(self): return f"{self._contig}:{self._start}-{self._end}"
    def __len__(self): return self._end - self._start
    def __iter__(self): return iter((self._contig, self._start, self._end))

    def __eq__(self, other):
        if not isinstance(other, Locus): return False
        return self._start == other._start and self._end == other._end and self._contig == other._contig

    def __lt__(self, other):
        if not isinstance(other, Locus): return NotImplemented
        return tuple(self) < tuple(other)

    def __le__(self, other):
        if not isinstance(other, Locus): return NotImplemented
        return tuple(self) <= tuple(other)

    def __gt__(self, other):
        if not isinstance(other, Locus): return NotImplemented
        return tuple(self) > tuple(other)

    def __ge__(self, other):
        if not isinstance(other, Locus): return NotImplemented
        return tuple(self) >= tuple(other)

    def __contains__(self, item: Union[int, 'Locus']):
        if isinstance(item, (int, np.integer)): return self._start <= item < self._end
        if isinstance(item, Locus):
            return item._contig == self._contig and self._start <= item._start and self._end >= item._end
        return False

    def overlaps(self, other: 'Locus') -> bool:
        """Returns ``True`` if both loci share a contig and at least one position. Abutting loci do not overlap."""
        return (self._contig == other._contig and
                max(self._start, other._start) < min(self._end, other._end))

    def intersection(self, other: 'Locus') -> 'Locus':
        """Returns the intersection of this locus and another as a NEW Locus.

        Args:
            other: The other locus.

        Returns:
            The overlapping region, or an empty locus if the contigs differ or the loci do not overlap.
        """
        if self._contig != other._contig: return Locus(self._contig, 0, 0)
        new_start = max(self._start, other._start)
        new_end = min(self._end, other._end)
        if new_start >= new_end: return Locus(self._contig, new_start, new_start)
        return Locus(self._contig, new_start, new_end)

    def union(self, other: 'Locus') -> 'Locus':
        """Returns the union of two overlapping loci, or an empty locus if they do not overlap."""
        if not self.overlaps(other): return Locus(self._contig, 0, 0)
        return self.hull(other)

    def hull(self, other: 'Locus') -> 'Locus':
        """Returns the convex hull (union extent) as a NEW Locus on this locus' contig.

        Args:
            other: The other locus. Its contig is not checked.

        Returns:
            A new ``Locus`` spanning from the minimum start to maximum end.
        """
        return Locus(self._contig, min(self._start, other._start), max(self._end, other._end))

    def __add__(self, other: 'Locus') -> 'Locus':
        if not isinstance(other, Locus): return NotImplemented
        return self.hull(other)

    def distance(self, other: 'Locus') -> int:
        """
        Returns the number of positions between the nearer edges of two loci.

        Overlapping or contiguous loci are 0 apart. Only coordinates are compared, the contigs are not.
        """
        return max(0, max(self._start, other._start) - min(self._end, other._end))

    def shift(self, x: int, y: int = None) -> 'Locus':
        """
        Shifts the locus coordinates.

        Args:
            x: Amount to shift start (and end if y is None).
            y: Amount to shift end (optional).

        Returns:
            A new shifted Locus.
        """
        return Locus(self._contig, self._start + x, self._end + (y if y is not None else x))

    @classmethod
    def parse(cls, region: str) -> 'Locus':
        """
        Parses a region string such as ``chr6:29,942,488-29,943,994``.

        Raises:
            ValueError: If the region is malformed.
        """
        if not (match := cls._REGION.match(region.strip())):
            raise ValueError(f"Cannot parse locus from region {region!r}")
        return cls(match['contig'], int(match['start'].replace(',', '')), int(match['end'].replace(',', '')))

    @classmethod
    def random(cls, rng: np.random.Generator = None, contig: str = 'chr1', length: int = None, min_len: int = 0,
               max_len: int = 100, min_start: int = 0, max_start: int = 1_000):
        """
        Generates a random Locus.

        Args:
            rng: Random number generator.
            contig: The contig name.
            length: Fixed length (optional).
            min_len: Minimum length.
            max_len: Maximum length (exclusive, unless equal to ``min_len``).
            min_start: Minimum start position.
            max_start: Maximum start position.

        Returns:
            A random Locus.
        """
        if rng is None: rng = RESOURCES.rng
        if length is None: length = rng.integers(min_len, max(min_len + 1, max_len))
        start = rng.integers(min_start, max(min_start + 1, max_start))
        return cls(contig, start, start + length)


class LocusBatch(Batch):
    """
    Batch of loci, powered by NumPy, for fast overlap queries.

    Loci are sorted by contig, start and end; ``query`` returns positions in the original input order.

    Examples:
        >>> batch = LocusBatch.build([Locus('chr6', 0, 10), Locus('chr6', 20, 30)])
        >>> batch.query(Locus('chr6', 5, 25))
        array([0, 1], dtype=int32)
    """
    __slots__ = ('_contigs', '_starts', '_ends', '_original_indices', '_spans', '_max_len')
    _DTYPE = np.int64

    def __init__(self, contigs: Iterable[str], starts: np.ndarray, ends: np.ndarray):
        contigs = np.asarray(list(contigs), dtype=object)
        starts = np.ascontiguousarray(starts, dtype=self._DTYPE)
        ends = np.ascontiguousarray(ends, dtype=self._DTYPE)
        if not len(contigs) == len(starts) == len(ends):
            raise ValueError("Contigs, starts and ends must have the same length")

        names, codes = np.unique(contigs.astype(str), return_inverse=True) if len(contigs) else ([], np.empty(0, int))
        # Lexsort: Primary key is last in the tuple
        order = np.lexsort((ends, starts, codes)).astype(np.int32)
        self._contigs = contigs[order]
        self._starts = starts[order]
        self._ends = ends[order]
        self._original_indices = order
        self._max_len = int(np.max(self._ends - self._starts)) if len(order) else 0

        sorted_codes = codes[order]
        self._spans = {
            name: (int(np.searchsorted(sorted_codes, i, side='left')),
                   int(np.searchsorted(sorted_codes, i, side='right')))
            for i, name in enumerate(names)
        }

    @property
    def component(self): return Locus

    @classmethod
    def empty(cls) -> 'LocusBatch':
        return cls([], np.empty(0, dtype=cls._DTYPE), np.empty(0, dtype=cls._DTYPE))

    @classmethod
    def build(cls, components: Iterable[Locus]) -> 'LocusBatch':
        """Creates a LocusBatch from an iterable of Locus objects."""
        loci = list(components)
        if not loci: return cls.empty()
        return cls([l.contig for l in loci], [l.start for l in loci], [l.end for l in loci])

    def __len__(self): return len(self._starts)
    def __repr__(self): return f"<LocusBatch: {len(self)} loci>"

    def __getitem__(self, item: int) -> Locus:
        """Returns the locus at *item* in the original input order."""
        if not isinstance(item, (int, np.integer)): raise TypeError(f"Invalid index type: {type(item)}")
        if item < 0: item += len(self)
        if not 0 <= item < len(self): raise IndexError("LocusBatch index out of range")
        i = int(np.flatnonzero(self._original_indices == item)[0])
        return Locus(self._contigs[i], self._starts[i], self._ends[i])

    def query(self, locus: Locus) -> np.ndarray:
        """
        Finds loci overlapping *locus* (sharing at least one position on the same contig).

        Args:
            locus: The query locus.

        Returns:
            Original indices of overlapping loci, in ascending order.
        """
        if locus.contig not in self._spans or locus.is_empty: return np.empty(0, dtype=np.int32)
        lo, hi = self._spans[locus.contig]
        hits = _query_kernel(self._starts[lo:hi], self._ends[lo:hi], self._original_indices[lo:hi],
                             locus.start, locus.end, self._max_len)
        return np.sort(hits)


# Kernels --------------------------------------------------------------------------------------------------------------
@jit(nopython=True, cache=True, nogil=True)
def _query_kernel(starts, ends, original_indices, q_start, q_end, max_len):
    # Any interval starting >= q_end cannot overlap [q_start, q_end)
    limit = np.searchsorted(starts, q_end, side='left')
    # We only need to look back as far as the longest interval; count first, then fill
    min_start_check = q_start - max_len
    count = 0
    for i in range(limit - 1, -1, -1):
        if starts[i] < min_start_check: break
        if ends[i] > q_start and ends[i] > starts[i]: count += 1

    out = np.empty(count, dtype=np.int32)
    idx = 0
    for i in range(limit - 1, -1, -1):
        if starts[i] < min_start_check: break
        if ends[i] > q_start and ends[i] > starts[i]:
            out[idx] = original_indices[i]
            idx += 1
    return out
