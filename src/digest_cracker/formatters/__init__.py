"""
Candidate alphabets for the digest cracker.
"""

from digest_cracker.errors import InputValidationError
from digest_cracker.formatters.base_formats import FormatStrategy
from digest_cracker.formatters.alnum_format import AlnumLowerFormat
from digest_cracker.formatters.printable_format import PrintableAsciiFormat


FORMATTERS: dict[str, FormatStrategy] = {
    "printable": PrintableAsciiFormat(),
    "alnum_lower": AlnumLowerFormat(),
}


def get_formatter(name: str) -> FormatStrategy:
    """Look up a registered alphabet by name."""
    try:
        return FORMATTERS[name]
    except KeyError:
        raise InputValidationError(
            f"unknown charset {name!r}, expected one of {sorted(FORMATTERS)}") from None
