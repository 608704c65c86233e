"""
Consensus filtering: projecting aligned reads onto reference regions (e.g. exons) and keeping the best-covered
allele per region.
"""
from typing import Hashable, Iterable, Mapping
from warnings import warn

import numpy as np

from allelib import AllelibWarning
from allelib.containers.allele import Allele
from allelib.core.alphabet import Alphabet
from allelib.core.interval import LocusBatch
from allelib.core.seq import Seq
from allelib.utils.resources import RESOURCES


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class ConsensusWarning(AllelibWarning): pass


# Classes --------------------------------------------------------------------------------------------------------------
class ConsensusFilter:
    """
    Projects read alleles onto a fixed set of region alleles.

    Each overlapping read is crossed into the region, the gap padding on either side is clipped off, and the
    result is kept if it covers at least ``min_breadth`` of the region.

    Args:
        regions: Region alleles keyed by a label (e.g. exon number). Their order is the consensus order.
        min_breadth: Minimum fraction of a region a clipped allele must span, between 0 and 1.

    Examples:
        >>> regions = {1: Allele.build('chr6', 10, 15), 2: Allele.build('chr6', 20, 25)}
        >>> consensus = ConsensusFilter(regions, min_breadth=0.8)
        >>> read = Allele.build('chr6', 8, 27, 'GGACGTACCCCCTTTTTGG', id='read1')
        >>> str(consensus.consensus(consensus.extract_all([read])))
        'ACGTATTTTT'
    """
    __slots__ = ('_keys', '_regions', '_index', '_min_breadth')

    def __init__(self, regions: Mapping[Hashable, Allele], min_breadth: float = 0.0):
        if not 0 <= min_breadth <= 1: raise ValueError(f'Minimum breadth must be between 0 and 1, got {min_breadth}')
        self._keys = list(regions)
        self._regions = [regions[key] for key in self._keys]
        self._index = LocusBatch.build(region.locus for region in self._regions)
        self._min_breadth = min_breadth

    @property
    def regions(self) -> dict[Hashable, Allele]: return dict(zip(self._keys, self._regions))
    @property
    def min_breadth(self) -> float: return self._min_breadth

    def extract(self, read: Allele) -> dict[Hashable, Allele]:
        """
        Crosses a read into every region it overlaps.

        Args:
            read: The read, as an allele over its alignment span.

        Returns:
            Clipped alleles keyed by region, labelled ``{read id}|region={key}|location={region locus}``.
            A read without an id is labelled by its own locus.
        """
        extracted = {}
        for i in self._index.query(read.locus):
            key, region = self._keys[i], self._regions[i]
            clipped = _strip_gaps(region.double_crossover(read))
            if clipped.is_empty or len(clipped) / len(region) < self._min_breadth: continue
            label = read.locus if read.id is None else read.id
            extracted[key] = clipped.with_id(f'{label}|region={key}|location={region.locus}')
        return extracted

    def extract_all(self, reads: Iterable[Allele]) -> dict[Hashable, list[Allele]]:
        """
        Extracts many reads concurrently on the shared thread pool.

        Returns:
            Every region key mapped to its clipped alleles, in read order.
        """
        grouped = {key: [] for key in self._keys}
        for extracted in RESOURCES.pool.map(self.extract, reads):
            for key, allele in extracted.items(): grouped[key].append(allele)
        return grouped

    @staticmethod
    def best(extracted: Mapping[Hashable, Iterable[Allele]]) -> dict[Hashable, Allele]:
        """Picks the allele with the most non-gap symbols per region; the earliest one wins ties."""
        return {
            key: max(alleles, key=lambda a: len(a) - a.symbols.count(Alphabet.DNA.gap))
            for key, alleles in extracted.items() if alleles
        }

    def consensus(self, extracted: Mapping[Hashable, Iterable[Allele]], remove_gaps: bool = False) -> Seq:
        """
        Concatenates the best allele of each region in region order.

        Regions without any allele are skipped with a ``ConsensusWarning``.

        Args:
            extracted: Alleles per region, as returned by ``extract_all``.
            remove_gaps: Whether to drop gap symbols from the result.

        Returns:
            The consensus sequence.
        """
        best = self.best(extracted)
        parts = []
        for key in self._keys:
            if key not in best:
                warn(f'No allele covers region {key!r}', ConsensusWarning)
                continue
            parts.append(best[key].symbols.encoded)
        data = np.concatenate(parts) if parts else np.empty(0, dtype=Alphabet.DTYPE)
        if remove_gaps: data = data[data != Alphabet.DNA.gap]
        return Alphabet.DNA.new_seq(data)


# Functions ------------------------------------------------------------------------------------------------------------
def _strip_gaps(allele: Allele) -> Allele:
    """Clips leading and trailing gap padding."""
    gap = Alphabet.DNA.gaps(1)
    if allele.symbols.startswith(gap): allele = allele.left_hard_clip(gap)
    if allele.symbols.endswith(gap): allele = allele.right_hard_clip(gap)
    return allele
