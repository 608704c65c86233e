import pytest
from allelib.containers.allele import Allele
from allelib.engines.consensus import ConsensusFilter, ConsensusWarning


@pytest.fixture
def regions():
    return {1: Allele.build('chr6', 10, 15), 2: Allele.build('chr6', 20, 25)}


@pytest.fixture
def read1(): return Allele.build('chr6', 8, 27, 'GGACGTACCCCCTTTTTGG', id='read1')
@pytest.fixture
def read2(): return Allele.build('chr6', 12, 22, 'C' * 10, id='read2')


class TestConsensusFilterInit:
    def test_regions(self, regions):
        consensus = ConsensusFilter(regions, min_breadth=0.5)
        assert consensus.regions == regions
        assert consensus.min_breadth == 0.5

    @pytest.mark.parametrize('min_breadth', [-0.1, 1.5])
    def test_invalid_breadth(self, regions, min_breadth):
        with pytest.raises(ValueError, match='Minimum breadth'):
            ConsensusFilter(regions, min_breadth=min_breadth)


class TestExtract:
    def test_full_coverage(self, regions, read1):
        extracted = ConsensusFilter(regions).extract(read1)
        assert str(extracted[1].sequence) == 'ACGTA'
        assert str(extracted[2].sequence) == 'TTTTT'
        assert extracted[1].id == 'read1|region=1|location=chr6:10-15'
        assert extracted[2].id == 'read1|region=2|location=chr6:20-25'

    def test_label_without_id(self, regions):
        extracted = ConsensusFilter(regions).extract(Allele.build('chr6', 8, 17, 'GGACGTACC'))
        assert extracted[1].id == 'chr6:8-17|region=1|location=chr6:10-15'

    def test_partial_coverage(self, regions, read2):
        extracted = ConsensusFilter(regions).extract(read2)
        assert extracted[1].locus == Allele.build('chr6', 12, 15).locus
        assert str(extracted[1].sequence) == 'CCC'
        assert str(extracted[2].sequence) == 'CC'
        assert list(ConsensusFilter(regions, min_breadth=0.5).extract(read2)) == [1]

    def test_no_overlap(self, regions):
        consensus = ConsensusFilter(regions)
        assert consensus.extract(Allele.build('chr6', 30, 35, 'ACGTA')) == {}
        assert consensus.extract(Allele.build('chr7', 10, 15, 'ACGTA')) == {}

    def test_extract_all(self, regions, read1, read2):
        extracted = ConsensusFilter(regions).extract_all([read2, read1])
        assert [a.id.split('|')[0] for a in extracted[1]] == ['read2', 'read1']
        assert [a.id.split('|')[0] for a in extracted[2]] == ['read2', 'read1']


class TestConsensus:
    def test_best(self, regions, read1, read2):
        best = ConsensusFilter.best(ConsensusFilter(regions).extract_all([read2, read1]))
        assert best[1].id.startswith('read1')
        assert best[2].id.startswith('read1')

    def test_consensus(self, regions, read1, read2):
        consensus = ConsensusFilter(regions)
        assert str(consensus.consensus(consensus.extract_all([read2, read1]))) == 'ACGTATTTTT'

    def test_missing_region(self, regions, read1):
        regions[3] = Allele.build('chr6', 100, 105)
        consensus = ConsensusFilter(regions)
        with pytest.warns(ConsensusWarning, match='region 3'):
            sequence = consensus.consensus(consensus.extract_all([read1]))
        assert str(sequence) == 'ACGTATTTTT'

    def test_remove_gaps(self, regions):
        consensus = ConsensusFilter({1: regions[1]})
        extracted = consensus.extract_all([Allele.build('chr6', 8, 17, 'GGAC-TACC')])
        assert str(consensus.consensus(extracted)) == 'AC-TA'
        assert str(consensus.consensus(extracted, remove_gaps=True)) == 'ACTA'
