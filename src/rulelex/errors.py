"""Exception classes for rulelex.

Two families share the RulelexError root:

- ConfigError: raised while reading, validating, or compiling a rule set.
  Always fatal to compilation; no partial configuration is returned.
- TokenizerError: raised by the scan engine. The default scan loop never
  raises for unrecognized input (it emits Unknown tokens instead), so most
  subclasses are reserved for stricter callers.
"""

from __future__ import annotations


def _prefix(path: str | None, line: int | None = None, column: int | None = None) -> str:
    """Build a "path:line:col " location prefix, or "" when nothing is known."""
    location = ""
    if path:
        location = f"{path}:"
    if line is not None:
        location += f"{line}:"
        if column is not None:
            location += f"{column}:"
    if location:
        location = location.rstrip(":") + " "
    return location


class RulelexError(Exception):
    """Base exception for all rulelex errors."""

    pass


# =========================================================================
# Configuration errors
# =========================================================================


class ConfigError(RulelexError):
    """Base class for rule-set configuration errors.

    Attributes:
        path: Identity of the rule-set source, when known
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{_prefix(path)}{message}")


class ConfigReadError(ConfigError):
    """The rule-set source could not be read (missing file, permissions)."""

    def __init__(self, path: str, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to read config file: {reason}", path=path)


class ConfigParseError(ConfigError):
    """The rule-set source is not valid TOML or does not match the schema."""

    def __init__(self, reason: str, path: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"Failed to parse config: {reason}", path=path)


class InvalidRegexError(ConfigError):
    """A pattern source text does not compile.

    Attributes:
        pattern: The offending pattern source text, verbatim
        reason: Compiler diagnostic, when available
    """

    def __init__(
        self,
        pattern: str,
        reason: str | None = None,
        path: str | None = None,
    ) -> None:
        self.pattern = pattern
        self.reason = reason
        message = f"Invalid regex pattern: {pattern!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, path=path)


class MissingFieldError(ConfigError):
    """A required field is absent or empty.

    Attributes:
        field: Dotted name of the missing field (e.g. "metadata.language_version")
    """

    def __init__(self, field: str, path: str | None = None) -> None:
        self.field = field
        super().__init__(f"Missing required field: {field}", path=path)


class ConfigurationError(ConfigError):
    """A configuration problem not covered by the other classes."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(f"Configuration error: {message}", path=path)


# =========================================================================
# Tokenization errors
# =========================================================================


class TokenizerError(RulelexError):
    """Base class for scan-engine errors."""

    pass


class TokenizerConfigError(TokenizerError):
    """A ConfigError surfaced while a Lexer was being set up.

    The original error is kept unchanged as ``config_error`` and is also
    chained as ``__cause__``.
    """

    def __init__(self, config_error: ConfigError) -> None:
        self.config_error = config_error
        super().__init__(f"Configuration error: {config_error}")


class UnexpectedCharacterError(TokenizerError):
    """An input character could not be classified.

    Attributes:
        char: The offending character
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    def __init__(
        self,
        char: str,
        line: int | None = None,
        column: int | None = None,
        source_file: str | None = None,
    ) -> None:
        self.char = char
        self.line = line
        self.column = column
        self.source_file = source_file
        super().__init__(f"{_prefix(source_file, line, column)}Unexpected character: {char!r}")


class InvalidTokenError(TokenizerError):
    """A token or token-type string is malformed."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Invalid token: {text!r}")


class TokenizationError(TokenizerError):
    """A scan-engine problem not covered by the other classes."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Tokenization error: {message}")
