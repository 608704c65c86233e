"""
Module for representing immutable symbol sequences.
"""
from typing import Union, Generator

import numpy as np


# Classes --------------------------------------------------------------------------------------------------------------
class Seq:
    """
    Immutable symbol sequence holding only encoded integers (uint8).

    Python indexing and slicing are 0-based; ``sublist`` offers the 1-based, inclusive view used by genomic
    coordinates.

    Note:
        Seq objects should be created via `Alphabet.seq()`.
    """
    __slots__ = ('_data', '_alphabet', '_hash')
    def __init__(self, data: np.ndarray, alphabet: 'Alphabet', _validation_token: object = None):
        if _validation_token is not alphabet:
            raise PermissionError("Seq objects must be created via an Alphabet")
        self._alphabet = alphabet
        self._data = data
        self._hash = None
        self._data.flags.writeable = False  # Enforce immutability for hashing safety

    @property
    def alphabet(self) -> 'Alphabet': return self._alphabet

    @property
    def encoded(self) -> np.ndarray:
        """Returns the underlying integer array (Zero Copy)."""
        return self._data

    def __array__(self, dtype=None, copy=None):
        """Allows the Seq to be treated as a numpy array."""
        return self._data.astype(dtype, copy=False) if dtype else self._data

    def __bytes__(self) -> bytes: return self._alphabet.decode(self._data)
    def __len__(self): return self._data.shape[0]
    def __str__(self): return self.__bytes__().decode('ascii')
    def __iter__(self): return iter(self._data)
    def __bool__(self): return len(self._data) > 0
    def __repr__(self):
        if len(self) <= 14: return str(self)
        # Decode only the parts we show
        head = self._alphabet.decode(self._data[:7]).decode('ascii')
        tail = self._alphabet.decode(self._data[-7:]).decode('ascii')
        return f"{head}...{tail}"

    def __contains__(self, item):
        if isinstance(item, (int, np.integer)): return item in self._data
        query = self._query(item)
        # Use bytes substring search (fast C implementation) on raw encoded data
        if query is not None: return query.tobytes() in self._data.tobytes()
        return False

    def __eq__(self, other):
        if self is other: return True
        if not isinstance(other, Seq): return False
        if self._alphabet != other._alphabet: return False
        if self._hash is not None and other._hash is not None and self._hash != other._hash: return False
        return np.array_equal(self._data, other._data)

    def __hash__(self):
        if self._hash is None: self._hash = hash(self._data.tobytes())
        return self._hash

    def __add__(self, other: 'Seq') -> 'Seq':
        if not isinstance(other, Seq): return NotImplemented
        if self._alphabet != other._alphabet:
            raise ValueError("Cannot concatenate sequences with different alphabets")
        return self._alphabet.new_seq(np.concatenate((self._data, other._data), axis=0))

    # Comparisons (Lexicographical)
    # Decoded bytes are compared because the internal integer order need not be alphabetical.
    def __lt__(self, other):
        if not isinstance(other, Seq): return NotImplemented
        return bytes(self) < bytes(other)

    def __le__(self, other):
        if not isinstance(other, Seq): return NotImplemented
        return bytes(self) <= bytes(other)

    def __gt__(self, other):
        if not isinstance(other, Seq): return NotImplemented
        return bytes(self) > bytes(other)

    def __ge__(self, other):
        if not isinstance(other, Seq): return NotImplemented
        return bytes(self) >= bytes(other)

    def __getitem__(self, item: Union[slice, int]) -> 'Seq':
        """
        Gets a subsequence using 0-based Python indexing.

        Args:
            item: Index or slice.

        Returns:
            A new Seq object representing the subsequence.
        """
        if isinstance(item, slice): return self._alphabet.new_seq(self._data[item])
        if isinstance(item, (int, np.integer)):
            if item < 0: item += len(self)
            if not 0 <= item < len(self): raise IndexError("Seq index out of range")
            return self._alphabet.new_seq(self._data[item:item + 1])
        raise TypeError(f"Invalid index type: {type(item)}")

    def sublist(self, start: int, end: int) -> 'Seq':
        """
        Returns the symbols from *start* to *end*, both 1-based and inclusive.

        Args:
            start: First position (1-based).
            end: Last position (1-based, inclusive). ``end == start - 1`` gives an empty sequence.

        Returns:
            A new Seq.

        Raises:
            IndexError: If the range falls outside the sequence.

        Examples:
            >>> Alphabet.DNA.seq('ACGTA').sublist(2, 4)
            CGT
        """
        if start < 1 or end > len(self) or end < start - 1:
            raise IndexError(f"Sublist {start}..{end} is out of range for a sequence of length {len(self)}")
        return self._alphabet.new_seq(self._data[start - 1:end])

    def symbols(self) -> Generator[str, None, None]:
        """Yields the decoded symbols one character at a time."""
        yield from str(self)

    def startswith(self, prefix) -> bool:
        query = self._query(prefix)
        return query is not None and len(query) <= len(self) and np.array_equal(self._data[:len(query)], query)

    def endswith(self, suffix) -> bool:
        query = self._query(suffix)
        return (query is not None and len(query) <= len(self) and
                np.array_equal(self._data[len(self) - len(query):], query))

    def count(self, symbol: Union[str, bytes, int]) -> int:
        """Counts occurrences of a single symbol (given as text or as its encoded index)."""
        if not isinstance(symbol, (int, np.integer)): symbol = self._alphabet.encode(symbol)[0]
        return int(np.count_nonzero(self._data == symbol))

    def _query(self, item) -> Union[np.ndarray, None]:
        """Encodes *item* with this alphabet, returning ``None`` if it cannot be expressed in it."""
        if isinstance(item, Seq):
            return item._data if item._alphabet == self._alphabet else None
        if isinstance(item, (str, bytes)):
            try: return self._alphabet.encode(item)
            except ValueError: return None
        return None
