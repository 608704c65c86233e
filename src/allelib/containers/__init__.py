"""
This module contains containers built on the core value types. Components that are processed in bulk have a batched
counterpart deriving from ``Batch``.
"""
from abc import ABC, abstractmethod
from typing import Iterable


# Classes --------------------------------------------------------------------------------------------------------------
class Batch(ABC):
    """
    Abstract base class for all batch containers.

    Batches are columnar containers that store multiple instances of a component
    efficiently (usually using SoA layout with NumPy arrays). They enforce the
    Sequence protocol (len, getitem, iter).
    """
    __slots__ = ()
    @abstractmethod
    def __len__(self) -> int: ...
    @classmethod
    @abstractmethod
    def empty(cls) -> 'Batch':
        """Creates an empty batch."""
        ...
    @property
    @abstractmethod
    def component(self):
        """Returns the component class stored in this batch."""
        ...
    @classmethod
    @abstractmethod
    def build(cls, components: Iterable[object]) -> 'Batch':
        """Constructs a batch from an iterable of components."""
        ...
    @abstractmethod
    def __getitem__(self, item): ...
    def __iter__(self):
        for i in range(len(self)): yield self[i]
    def __bool__(self):
        return len(self) > 0
