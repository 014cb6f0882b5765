"""Token and TokenType definitions for the rulelex scan engine.

The lexer produces a stream of Token objects. Each Token has a two-level
classification (TokenType), the exact matched text, and a source position.

Thread Safety:
Token and TokenType are frozen (immutable) and safe to share across threads.

Performance Note:
Token stores raw coordinates and lazily creates SourceLocation on demand,
so tokens whose location is never inspected never allocate one.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rulelex.errors import InvalidTokenError

if TYPE_CHECKING:
    from rulelex.location import SourceLocation

# Category of the one-character fallback token
UNKNOWN_CATEGORY = "Unknown"

_SEPARATOR = ":"


@dataclass(frozen=True, slots=True)
class TokenType:
    """Two-level token classification.

    The category drives priority ordering during scanning; the subcategory
    is informational. The textual form is ``category`` or
    ``category:subcategory``, and ``TokenType.parse(str(t)) == t`` holds for
    every instance (neither part may contain a colon).

    Examples:
        >>> str(TokenType("Keyword", "ControlFlow"))
        'Keyword:ControlFlow'
        >>> TokenType.parse("Identifier")
        TokenType(category='Identifier', subcategory=None)

    """

    category: str
    subcategory: str | None = None

    def __post_init__(self) -> None:
        if _SEPARATOR in self.category or (
            self.subcategory is not None and _SEPARATOR in self.subcategory
        ):
            raise InvalidTokenError(str(self))

    @classmethod
    def parse(cls, text: str) -> TokenType:
        """Parse the ``category`` or ``category:subcategory`` form.

        Raises:
            InvalidTokenError: If the text has more than two colon-separated parts
        """
        parts = text.split(_SEPARATOR)
        if len(parts) == 1:
            return cls(parts[0])
        if len(parts) == 2:
            return cls(parts[0], parts[1])
        raise InvalidTokenError(text)

    def __str__(self) -> str:
        if self.subcategory is None:
            return self.category
        return f"{self.category}{_SEPARATOR}{self.subcategory}"


UNKNOWN = TokenType(UNKNOWN_CATEGORY)


@dataclass(frozen=True, slots=True)
class Token:
    """A classified, positioned slice of source text.

    Attributes:
        type: The token classification
        value: The exact matched substring
        line: Line of the first character (1-indexed)
        column: Column of the first character (1-indexed)
        offset: UTF-8 byte offset of the first character
        end_offset: UTF-8 byte offset just past the last character
        source_file: Optional source file path

    Thread Safety:
        Frozen dataclass. The lazy location cache uses an idempotent write.

    """

    type: TokenType
    value: str
    line: int
    column: int
    offset: int = 0
    end_offset: int = 0
    source_file: str | None = None
    _location_cache: SourceLocation | None = field(
        default=None, repr=False, compare=False, hash=False
    )

    @property
    def category(self) -> str:
        return self.type.category

    @property
    def subcategory(self) -> str | None:
        return self.type.subcategory

    @property
    def location(self) -> SourceLocation:
        """Source location (lazily created and cached)."""
        if self._location_cache is not None:
            return self._location_cache

        # Import here to avoid circular import at module load
        from rulelex.location import SourceLocation

        loc = SourceLocation(
            line=self.line,
            column=self.column,
            offset=self.offset,
            end_offset=self.end_offset,
            source_file=self.source_file,
        )
        object.__setattr__(self, "_location_cache", loc)
        return loc

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Token({self.type}, {val!r}, {self.line}:{self.column})"
