"""
Lowercase alphanumeric format
"""

import string

from .base_formats import FormatStrategy


class AlnumLowerFormat(FormatStrategy):
    """
    Lowercase letters followed by digits: 36 symbols.
    E.g. 0 -> "aaa", 36**3 - 1 -> "999"
    """

    _SYMBOLS = (string.ascii_lowercase + string.digits).encode("ascii")

    @property
    def symbols(self) -> bytes:
        return self._SYMBOLS
