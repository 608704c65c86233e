"""
Process-wide state shared by allelib: the random number generator used by the ``random`` factories, the thread
pool used for batch extraction, and optional kernel compilation.
"""
from functools import cached_property, lru_cache
from importlib import import_module
from concurrent.futures import ThreadPoolExecutor
from numpy.random import default_rng, Generator
import atexit
import os
from typing import Callable


# Classes --------------------------------------------------------------------------------------------------------------
class Resources:
    """
    Lazily created process-wide resources.

    Nothing is allocated until first use; the thread pool is shut down at interpreter exit.

    Examples:
        >>> RESOURCES.seed(42)
        >>> first = RESOURCES.rng.integers(1000)
        >>> RESOURCES.seed(42)
        >>> bool(RESOURCES.rng.integers(1000) == first)
        True
    """
    def __init__(self) -> None:
        atexit.register(self._cleanup)

    @cached_property
    def rng(self) -> Generator:
        """Returns the shared random number generator."""
        return default_rng()

    def seed(self, seed: int = None) -> None:
        """Replaces the shared random number generator with a freshly seeded one."""
        self.__dict__['rng'] = default_rng(seed)

    @cached_property
    def available_cpus(self) -> int:
        try: return os.process_cpu_count()
        except AttributeError: return os.cpu_count()

    @cached_property
    def pool(self) -> ThreadPoolExecutor:
        """Returns the shared thread pool, sized to the available CPUs."""
        return ThreadPoolExecutor(min(32, (self.available_cpus or 1) + 4), thread_name_prefix='allelib')

    def _cleanup(self):
        if 'pool' in self.__dict__: self.pool.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    @lru_cache(maxsize=None)
    def has_module(module_name: str) -> bool:
        """Returns ``True`` if *module_name* can be imported."""
        try:
            import_module(module_name)
            return True
        except ImportError: return False

    def __enter__(self): return self
    def __exit__(self, exc_type, exc_val, exc_tb): self._cleanup()


# Decorators -----------------------------------------------------------------------------------------------------------
def jit(signature_or_function=None, **options) -> Callable:
    """
    Compiles a kernel with ``numba.jit`` when numba is installed, and leaves it as plain Python otherwise.

    Works bare (``@jit``) and with options (``@jit(nopython=True, cache=True)``); options are ignored without numba.
    """
    if not RESOURCES.has_module('numba'):
        if callable(signature_or_function): return signature_or_function
        return lambda func: func
    from numba import jit as numba_jit
    if callable(signature_or_function): return numba_jit(signature_or_function)
    return numba_jit(signature_or_function, **options)


# Constants ------------------------------------------------------------------------------------------------------------
RESOURCES = Resources()
