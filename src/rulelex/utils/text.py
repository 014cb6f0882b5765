"""Text helpers for cursor bookkeeping and diagnostics.

Example:
    >>> from rulelex.utils.text import utf8_width, describe_char
    >>> utf8_width("a"), utf8_width("§"), utf8_width("€"), utf8_width("😀")
    (1, 2, 3, 4)
    >>> describe_char("\\t")
    "'\\\\t' (U+0009)"
"""

from __future__ import annotations


def utf8_width(char: str) -> int:
    """Return the number of bytes ``char`` occupies when encoded as UTF-8.

    Computed from the code point, so no intermediate bytes object is built.
    Lone surrogates report 3, matching the ``surrogatepass`` encoding.

    Args:
        char: A single character

    Returns:
        Encoded width in bytes (1-4)
    """
    code = ord(char)
    if code < 0x80:
        return 1
    if code < 0x800:
        return 2
    if code < 0x10000:
        return 3
    return 4


def describe_char(char: str) -> str:
    """Render a character for log and error messages.

    Examples:
        >>> describe_char("x")
        "'x' (U+0078)"
        >>> describe_char("")
        'end of input'
    """
    if not char:
        return "end of input"
    return f"{char!r} (U+{ord(char):04X})"
