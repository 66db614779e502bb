"""
Printable ASCII format
"""

from .base_formats import FormatStrategy

FIRST_CODE_POINT = 33   # '!'
LAST_CODE_POINT = 126   # '~'
ALPHABET_SIZE = LAST_CODE_POINT - FIRST_CODE_POINT + 1


class PrintableAsciiFormat(FormatStrategy):
    """
    Every printable, non-space ASCII character: code points 33..126.
    Index 0 of length 3 -> "!!!", last index -> "~~~".
    """

    _SYMBOLS = bytes(range(FIRST_CODE_POINT, LAST_CODE_POINT + 1))

    @property
    def symbols(self) -> bytes:
        return self._SYMBOLS

    def encode_into(self, index: int, buf: bytearray) -> None:
        # contiguous alphabet: a digit is an offset from the base code point
        for pos in range(len(buf) - 1, -1, -1):
            index, digit = divmod(index, ALPHABET_SIZE)
            buf[pos] = FIRST_CODE_POINT + digit
