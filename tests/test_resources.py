from concurrent.futures import ThreadPoolExecutor

from allelib.containers.allele import Allele
from allelib.utils.resources import RESOURCES, Resources, jit


class TestResources:
    def test_seed_is_reproducible(self):
        RESOURCES.seed(1)
        first = Allele.random()
        RESOURCES.seed(1)
        assert Allele.random() == first

    def test_pool(self):
        with Resources() as resources:
            assert isinstance(resources.pool, ThreadPoolExecutor)
            assert list(resources.pool.map(len, ['A', 'AC'])) == [1, 2]

    def test_has_module(self):
        assert Resources.has_module('numpy')
        assert not Resources.has_module('not_a_real_module_name')


class TestJit:
    def test_bare_and_configured(self):
        @jit
        def add(a, b): return a + b

        @jit(nopython=True)
        def mul(a, b): return a * b

        assert add(2, 3) == 5
        assert mul(2, 3) == 6
