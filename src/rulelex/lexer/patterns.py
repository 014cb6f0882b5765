"""Category-pattern matcher mixin."""

from __future__ import annotations

import re

from rulelex.tokens import TokenType


class PatternMatcherMixin:
    """Mixin providing priority-ordered pattern matching.

    The Lexer flattens the configuration into ``_pattern_table`` once:
    categories by ascending priority (name breaks ties), each category's
    patterns in declaration order.
    """

    # These will be set by the Lexer class
    _source: str
    _index: int
    _pattern_table: tuple[tuple[TokenType, re.Pattern[str]], ...]

    def _find_pattern_match(self) -> tuple[TokenType, int] | None:
        """Find the first pattern that matches at the cursor.

        Patterns run against the whole source starting at the cursor index,
        so ``^`` means start of input (or of a line under ``(?m)``) and
        lookbehinds and ``\\b`` see the text before the cursor. Only matches
        starting at the cursor count, and the first hit wins even if a later
        pattern would match more text.

        Returns:
            (token type, length in characters), or None if nothing matches.
        """
        source = self._source
        index = self._index
        for token_type, regex in self._pattern_table:
            match = regex.match(source, index)
            if match is None:
                continue
            length = match.end() - index
            if length == 0:
                # An empty match would stall the cursor
                continue
            return token_type, length
        return None
