"""
rulelex — Configuration-Driven Lexical Scanner

Turns source text into classified, positioned tokens using a declarative
rule set: token categories with priorities, regex patterns per category,
and special rules for delimited regions and column-anchored markers.
Zero runtime dependencies.

Quick Start:
    >>> from rulelex import load_config, tokenize
    >>> config = load_config("rules/abap.toml")
    >>> for token in tokenize("WRITE 'Hi'.", config):
    ...     print(token.type, repr(token.value), token.line, token.column)
    Keyword:Output 'WRITE' 1 1
    String:Literal "'Hi'" 1 7
    Punctuation '.' 1 11

Building a configuration in code:
    >>> from rulelex import RawRuleSet, Metadata, CategoryConfig, RawPattern
    >>> raw = RawRuleSet(
    ...     metadata=Metadata(language_version="1.0"),
    ...     token_categories={"Number": CategoryConfig(priority=1, color="cyan")},
    ...     patterns={"Number": [RawPattern(regex=r"\\d+")]},
    ... )
    >>> [t.value for t in tokenize("1 22 333", compile_config(raw))]
    ['1', '22', '333']

Driving the lexer directly:
    >>> lexer = Lexer(source, config)
    >>> while (token := lexer.next_token()) is not None:
    ...     handle(token)

"""

from collections.abc import Iterator

from rulelex.config import CompiledConfig, compile_config
from rulelex.errors import (
    ConfigError,
    ConfigParseError,
    ConfigReadError,
    ConfigurationError,
    InvalidRegexError,
    InvalidTokenError,
    MissingFieldError,
    RulelexError,
    TokenizationError,
    TokenizerConfigError,
    TokenizerError,
    UnexpectedCharacterError,
)
from rulelex.lexer import Lexer
from rulelex.loader import load_config, load_config_with_imports, load_raw_rule_set, parse_rule_set
from rulelex.location import SourceLocation
from rulelex.rules import (
    CategoryConfig,
    CompiledPattern,
    ContextRule,
    CustomAction,
    Metadata,
    RawPattern,
    RawRuleSet,
    RawSpecialRule,
    SpecialRule,
)
from rulelex.tokens import UNKNOWN, UNKNOWN_CATEGORY, Token, TokenType

__version__ = "0.1.0"


def tokenize(
    source: str,
    config: CompiledConfig | RawRuleSet,
    *,
    source_file: str | None = None,
) -> Iterator[Token]:
    """Tokenize source text.

    Args:
        source: Text to scan
        config: Compiled configuration (or a raw rule set, compiled first)
        source_file: Optional source file path recorded on each token

    Yields:
        Tokens in source order. Unrecognized characters come out as
        single-character Unknown tokens.

    Raises:
        TokenizerConfigError: If a raw rule set fails to compile
    """
    return Lexer(source, config, source_file=source_file).tokenize()


__all__ = [  # noqa: RUF022 — grouped by category for maintainability
    # Version
    "__version__",
    # Core API
    "tokenize",
    "Lexer",
    # Configuration
    "CompiledConfig",
    "compile_config",
    "load_config",
    "load_config_with_imports",
    "load_raw_rule_set",
    "parse_rule_set",
    # Rule records
    "CategoryConfig",
    "CompiledPattern",
    "ContextRule",
    "CustomAction",
    "Metadata",
    "RawPattern",
    "RawRuleSet",
    "RawSpecialRule",
    "SpecialRule",
    # Tokens
    "Token",
    "TokenType",
    "UNKNOWN",
    "UNKNOWN_CATEGORY",
    "SourceLocation",
    # Errors
    "RulelexError",
    "ConfigError",
    "ConfigReadError",
    "ConfigParseError",
    "InvalidRegexError",
    "MissingFieldError",
    "ConfigurationError",
    "TokenizerError",
    "TokenizerConfigError",
    "UnexpectedCharacterError",
    "InvalidTokenError",
    "TokenizationError",
]
