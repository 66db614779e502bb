from abc import ABC, abstractmethod

from digest_cracker.errors import InputValidationError


class FormatStrategy(ABC):
    """
    Bijection between an integer index and a fixed-length candidate.

    The candidate for ``index`` is the base-``alphabet_size`` representation
    of ``index``, most significant digit first, every digit mapped through
    ``symbols``.
    """

    def __init__(self) -> None:
        self._offsets = {symbol: offset for offset, symbol in enumerate(self.symbols)}
        if len(self._offsets) != len(self.symbols):
            raise ValueError("alphabet symbols must be distinct")

    @property
    @abstractmethod
    def symbols(self) -> bytes:
        """Ordered alphabet, one byte per symbol."""

    @property
    def alphabet_size(self) -> int:
        return len(self.symbols)

    def size(self, length: int) -> int:
        """Number of candidates of exactly ``length`` symbols."""
        if length < 0:
            raise InputValidationError(f"length must be >= 0, got {length}")
        return self.alphabet_size ** length

    def encode(self, index: int, length: int) -> bytes:
        """Candidate bytes for ``index``."""
        if length < 1:
            raise InputValidationError(f"length must be >= 1, got {length}")
        if not 0 <= index < self.size(length):
            raise InputValidationError(
                f"index {index} outside keyspace of length {length}")
        buf = bytearray(length)
        self.encode_into(index, buf)
        return bytes(buf)

    def encode_into(self, index: int, buf: bytearray) -> None:
        """Write the candidate for ``index`` into ``buf`` (no range check)."""
        symbols = self.symbols
        base = len(symbols)
        for pos in range(len(buf) - 1, -1, -1):
            index, digit = divmod(index, base)
            buf[pos] = symbols[digit]

    def decode(self, candidate: bytes | str) -> int:
        """Index of ``candidate``; inverse of :meth:`encode`."""
        if isinstance(candidate, str):
            try:
                candidate = candidate.encode("ascii")
            except UnicodeEncodeError as e:
                raise InputValidationError(
                    f"candidate {candidate!r} has a symbol outside the alphabet") from e
        if not candidate:
            raise InputValidationError("cannot decode an empty candidate")
        base = self.alphabet_size
        index = 0
        for symbol in candidate:
            offset = self._offsets.get(symbol)
            if offset is None:
                raise InputValidationError(
                    f"symbol {chr(symbol)!r} is not in the alphabet")
            index = index * base + offset
        return index

    def number_to_string(self, num: int, length: int) -> str:
        """Format a single index into its candidate string."""
        return self.encode(num, length).decode("ascii")
