"""
Module for representing ASCII symbol alphabets, including the reserved gap symbol used for padding alleles.
"""
from typing import Union, Final, ClassVar, Optional

import numpy as np

from allelib.core.seq import Seq
from allelib.utils.resources import RESOURCES


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class AlphabetError(ValueError):
    """Raised when an alphabet is invalid or a symbol is not part of it."""


# Classes --------------------------------------------------------------------------------------------------------------
class Alphabet:
    """
    A class to represent an alphabet of ASCII symbols.

    Symbols are encoded as their index in the alphabet (``uint8``). Lookup is case-insensitive, decoding always
    yields the symbols as they were declared.

    Examples:
        >>> Alphabet.DNA.seq('acgt-')
        ACGT-
    """
    __slots__ = ('_data', '_lookup_table', '_trans_table', '_decode_table', '_gap')
    DTYPE: Final = np.uint8
    INVALID: Final = np.iinfo(DTYPE).max
    MAX_LEN: Final = INVALID + 1
    ENCODING: Final = 'ascii'

    DNA: ClassVar['Alphabet']

    def __init__(self, symbols: bytes, gap: bytes = None):
        """
        Initializes an Alphabet.

        Args:
            symbols: The symbols in the alphabet as bytes.
            gap: Optional placeholder symbol, must be one of ``symbols``.

        Raises:
            AlphabetError: If symbols are not ASCII, too long, contain duplicates, or if the gap is not a symbol.
        """
        if not symbols.isascii(): raise AlphabetError('Alphabet symbols must be a valid ASCII string')
        if len(symbols) >= self.MAX_LEN:
            raise AlphabetError(f'Alphabet size must be below {self.MAX_LEN} symbols ({self.DTYPE})')
        if len(set(symbols.upper())) != len(symbols): raise AlphabetError('Alphabet contains duplicate symbols')

        self._data: np.ndarray = np.frombuffer(symbols, dtype=self.DTYPE)

        # Build Lookup Table
        self._lookup_table = np.full(self.MAX_LEN, self.INVALID, dtype=self.DTYPE)
        indices = np.arange(len(symbols), dtype=self.DTYPE)
        self._lookup_table[np.frombuffer(symbols, dtype=self.DTYPE)] = indices
        self._lookup_table[np.frombuffer(symbols.lower(), dtype=self.DTYPE)] = indices
        self._trans_table = self._lookup_table.tobytes()

        # Build Decode Table (for fast tobytes)
        decode_map = np.zeros(self.MAX_LEN, dtype=self.DTYPE)
        decode_map[:len(self._data)] = self._data
        self._decode_table = decode_map.tobytes()

        self._gap = None
        if gap is not None:
            if len(gap) != 1 or self._lookup_table[gap[0]] == self.INVALID:
                raise AlphabetError(f'Gap symbol {gap!r} is not a single symbol of the alphabet')
            self._gap = self._lookup_table[gap[0]]

    def __len__(self):
        return len(self._data)

    def __contains__(self, item):
        # Fast O(1) lookup using the table
        try:
            if isinstance(item, (int, np.integer)):
                return self._lookup_table[item] != self.INVALID
            if isinstance(item, (str, bytes)):
                if len(item) != 1: return False
                val = ord(item) if isinstance(item, str) else item[0]
                return self._lookup_table[val] != self.INVALID
        except (IndexError, ValueError, TypeError):
            pass
        return False

    def __repr__(self):
        return f"Alphabet({self._data.tobytes()!r})"

    def __eq__(self, other):
        if self is other: return True
        if not isinstance(other, Alphabet): return False
        return np.array_equal(self._data, other._data) and self._gap == other._gap

    def __hash__(self):
        return hash((self._data.tobytes(), self._gap))

    @property
    def gap(self) -> Optional[int]:
        """Returns the encoded gap symbol, or ``None`` if the alphabet has no gap."""
        return self._gap

    def encode(self, text: Union[str, bytes]) -> np.ndarray:
        """
        Encodes text into an array of symbol indices.

        Unlike a lenient translation, every byte must belong to the alphabet.

        Args:
            text: The text to encode.

        Returns:
            A numpy array of encoded indices.

        Raises:
            AlphabetError: If the text contains symbols not in the alphabet.
        """
        if isinstance(text, str):
            try: text = text.encode(self.ENCODING)
            except UnicodeEncodeError as e: raise AlphabetError(f'Sequence is not ASCII: {text!r}') from e
        encoded = np.frombuffer(text.translate(self._trans_table), dtype=self.DTYPE)
        if (invalid := np.flatnonzero(encoded == self.INVALID)).size:
            raise AlphabetError(f'Symbol {chr(text[invalid[0]])!r} at index {invalid[0]} is not in {self}')
        return encoded

    def decode(self, encoded: np.ndarray) -> bytes:
        """Decodes an array of indices back to bytes.

        Args:
            encoded: The numpy array of indices (uint8).

        Returns:
            The decoded bytes string.
        """
        # Ensure uint8 for byte-wise translation
        if encoded.dtype != self.DTYPE:
            encoded = encoded.astype(self.DTYPE, copy=False)
        return encoded.tobytes().translate(self._decode_table)

    def new_seq(self, data: np.ndarray) -> 'Seq':
        """
        Factory method. The ONLY valid way to create a Seq.
        """
        return Seq(data, self, _validation_token=self)

    def seq(self, data: Union['Seq', str, bytes, np.ndarray]) -> 'Seq':
        """Creates a Seq object from various input types, ensuring correct encoding.

        Args:
            data: The input data. Can be a ``Seq``, string, bytes, or an array of encoded indices.

        Returns:
            A new ``Seq`` object with this alphabet.

        Raises:
            AlphabetError: If the input contains symbols not in the alphabet.
        """
        if isinstance(data, Seq):
            if data.alphabet != self: raise AlphabetError(f'Sequence has a different alphabet "{data.alphabet}"')
            return data
        if isinstance(data, np.ndarray):
            data = np.asarray(data, dtype=self.DTYPE)
            if data.size and data.max() >= len(self): raise AlphabetError(f'Encoded index out of range for {self}')
            # Copy so that locking the buffer never affects the caller's array
            return self.new_seq(data.copy())
        return self.new_seq(self.encode(data))

    def empty_seq(self) -> 'Seq':
        """Returns an empty sequence with this alphabet.

        Returns:
            An empty ``Seq``.
        """
        return self.new_seq(np.empty(0, dtype=self.DTYPE))

    def gaps(self, length: int) -> 'Seq':
        """Returns a sequence of *length* gap symbols.

        Raises:
            AlphabetError: If the alphabet has no gap symbol.
        """
        if self._gap is None: raise AlphabetError(f'{self} has no gap symbol')
        return self.new_seq(np.full(length, self._gap, dtype=self.DTYPE))

    def random_seq(self, rng: np.random.Generator = None, length: int = None, min_len: int = 5, max_len: int = 5000,
                   gapped: bool = False) -> 'Seq':
        """
        Generates a random sequence from this alphabet.

        Args:
            rng: Random number generator (optional).
            length: Exact length of sequence to generate.
            min_len: Minimum length if length is not specified.
            max_len: Maximum length if length is not specified.
            gapped: Whether the gap symbol may be drawn.

        Returns:
            A random Seq object.

        Examples:
            >>> s = Alphabet.DNA.random_seq(length=10)
            >>> len(s)
            10
        """
        if rng is None: rng = RESOURCES.rng
        if length is None: length = rng.integers(min_len, max_len)
        choices = np.arange(len(self._data), dtype=self.DTYPE)
        if not gapped and self._gap is not None: choices = choices[choices != self._gap]
        return self.new_seq(rng.choice(choices, size=length).astype(self.DTYPE))


Alphabet.DNA = Alphabet(b'ACGT-', gap=b'-')
