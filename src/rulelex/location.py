"""Source location tracking for tokens and error messages.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of a token in the scanned text.

    Line and column are 1-indexed character counts. Offsets are UTF-8 byte
    offsets into the source, so ``column`` and ``offset`` diverge as soon as
    a line contains multi-byte characters.

    Attributes:
        line: Line number of the first character (1-indexed)
        column: Column of the first character (1-indexed)
        offset: Byte offset of the first character
        end_offset: Byte offset just past the last character
        source_file: Source file path (optional)

    Examples:
        >>> loc = SourceLocation(line=3, column=7, offset=40, end_offset=44)
        >>> str(loc)
        '3:7'
        >>> str(SourceLocation(1, 1, source_file="prog.abap"))
        'prog.abap:1:1'

    """

    line: int
    column: int
    offset: int = 0
    end_offset: int = 0
    source_file: str | None = None

    def __str__(self) -> str:
        """Format location for error messages."""
        if self.source_file:
            return f"{self.source_file}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"

    @property
    def byte_length(self) -> int:
        """Encoded size of the located text in bytes."""
        return self.end_offset - self.offset
