"""Configuration-driven scan engine.

At every cursor position the lexer skips whitespace, then tries, in order:

1. special rules (declaration order, first valid rule wins),
2. category patterns (ascending priority, first anchored match wins),
3. a one-character Unknown token.

Step 3 always succeeds, so scanning never stalls and never fails on
unrecognized text.

Thread Safety:
Lexer instances are single-use. Create one per source string.
The cursor is mutated by every next_token() call without locking. The
CompiledConfig is only read, so one config can serve many lexers.

"""

from __future__ import annotations

import re
from collections.abc import Iterator

from rulelex.config import CompiledConfig, compile_config
from rulelex.errors import ConfigError, TokenizerConfigError, UnexpectedCharacterError
from rulelex.lexer.patterns import PatternMatcherMixin
from rulelex.lexer.special import SpecialRuleMatcherMixin
from rulelex.rules import RawRuleSet, SpecialRule
from rulelex.tokens import UNKNOWN, Token, TokenType
from rulelex.utils.logger import get_logger
from rulelex.utils.text import describe_char, utf8_width

logger = get_logger(__name__)


class Lexer(
    # Matchers (pure logic, no cursor mutation)
    SpecialRuleMatcherMixin,
    PatternMatcherMixin,
):
    """Scan engine over one source string.

    The cursor has three coordinates that always move together:
    ``position`` (UTF-8 byte offset), ``line`` and ``column`` (1-indexed
    character counts). Columns count characters, not bytes.

    Usage:
        >>> lexer = Lexer("IF x. ENDIF.", config)
        >>> for token in lexer.tokenize():
        ...     print(token)
        Token(Keyword:ControlFlow, 'IF', 1:1)
        Token(Identifier, 'x', 1:4)
        ...

    """

    __slots__ = (
        "_source",
        "_source_len",  # Cached len(source)
        "_index",  # Character index into _source
        "_pos",  # UTF-8 byte offset of _index
        "_lineno",
        "_col",
        "_source_file",
        "_strict",
        "_config",
        "_special_rules",
        "_pattern_table",
    )

    def __init__(
        self,
        source: str,
        config: CompiledConfig | RawRuleSet,
        *,
        source_file: str | None = None,
        strict: bool = False,
    ) -> None:
        """Initialize lexer with source text.

        Args:
            source: Text to scan
            config: Compiled configuration, or a raw rule set to compile now
            source_file: Optional source file path for token locations
            strict: Raise UnexpectedCharacterError instead of emitting
                Unknown tokens

        Raises:
            TokenizerConfigError: If a raw rule set fails to compile
        """
        if isinstance(config, RawRuleSet):
            try:
                config = compile_config(config)
            except ConfigError as exc:
                raise TokenizerConfigError(exc) from exc

        self._source = source
        self._source_len = len(source)
        self._index = 0
        self._pos = 0
        self._lineno = 1
        self._col = 1
        self._source_file = source_file
        self._strict = strict
        self._config = config

        # Flattened once; the config is not consulted again while scanning
        self._special_rules: tuple[tuple[SpecialRule, TokenType], ...] = tuple(
            (rule, TokenType(rule.token_type)) for rule in config.special_rules
        )
        self._pattern_table: tuple[tuple[TokenType, re.Pattern[str]], ...] = tuple(
            (TokenType(category, pattern.subcategory), pattern.regex)
            for category in config.ordered_categories()
            for pattern in config.get_patterns(category) or ()
        )

    # =========================================================================
    # Cursor
    # =========================================================================

    @property
    def config(self) -> CompiledConfig:
        return self._config

    @property
    def position(self) -> int:
        """UTF-8 byte offset of the cursor."""
        return self._pos

    @property
    def index(self) -> int:
        """Character index of the cursor."""
        return self._index

    @property
    def line(self) -> int:
        return self._lineno

    @property
    def column(self) -> int:
        return self._col

    @property
    def at_end(self) -> bool:
        return self._index >= self._source_len

    def advance(self) -> str:
        """Consume one character.

        Moves ``position`` by the character's encoded width and ``column``
        by one; a newline moves to column 1 of the next line.

        Returns:
            The consumed character, or "" at end of input.
        """
        if self._index >= self._source_len:
            return ""

        char = self._source[self._index]
        self._index += 1
        self._pos += utf8_width(char)

        if char == "\n":
            self._lineno += 1
            self._col = 1
        else:
            self._col += 1

        return char

    def _skip_whitespace(self) -> None:
        source = self._source
        source_len = self._source_len
        while self._index < source_len and source[self._index].isspace():
            self.advance()

    # =========================================================================
    # Scanning
    # =========================================================================

    def next_token(self) -> Token | None:
        """Produce the next token.

        Returns:
            The next token, or None once the input is exhausted (and on
            every call after that).

        Raises:
            UnexpectedCharacterError: Only in strict mode, where no rule
                matches at the cursor
        """
        self._skip_whitespace()

        if self._index >= self._source_len:
            return None

        match = self._check_special_rules()
        if match is None:
            match = self._find_pattern_match()
        if match is not None:
            token_type, length = match
            token = self._consume(token_type, length)
            logger.debug("Matched token: %r", token)
            return token

        char = self._source[self._index]
        if self._strict:
            raise UnexpectedCharacterError(char, self._lineno, self._col, self._source_file)
        logger.debug(
            "Unknown token at %d:%d: %s", self._lineno, self._col, describe_char(char)
        )
        return self._consume(UNKNOWN, 1)

    def tokenize(self) -> Iterator[Token]:
        """Yield tokens until the input is exhausted.

        Complexity: O(n) cursor work. Rules and patterns read the source in
        place at the cursor, so the remaining text is never copied.
        """
        while (token := self.next_token()) is not None:
            yield token

    def _consume(self, token_type: TokenType, length: int) -> Token:
        """Advance over ``length`` characters and build their token.

        The token carries the coordinates of its first character.
        """
        start_index = self._index
        start_pos = self._pos
        lineno = self._lineno
        col = self._col

        for _ in range(length):
            self.advance()

        return Token(
            type=token_type,
            value=self._source[start_index : self._index],
            line=lineno,
            column=col,
            offset=start_pos,
            end_offset=self._pos,
            source_file=self._source_file,
        )
