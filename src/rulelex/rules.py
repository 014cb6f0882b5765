"""Rule-set records, raw and compiled.

A rule set is authored as TOML (see rulelex.loader), deserialized into a
RawRuleSet, and compiled into a CompiledConfig (see rulelex.config). The
records here are plain frozen dataclasses; the only behavior they carry is
schema validation in the ``from_dict`` factories.

Schema (TOML)::

    imports = ["common.toml"]          # optional

    [metadata]
    language_version = "7.50"
    case_sensitive = false              # optional, default true
    allow_unicode_identifiers = false   # optional, default true

    [token_categories.Keyword]
    priority = 1
    color = "blue"

    [[patterns.Keyword]]
    regex = "(?:IF|ELSE|ENDIF)\\b"
    subcategory = "ControlFlow"         # optional

    [context_rules.string]
    start = "'"
    end = "'"
    escape = "''"                       # optional
    multiline = false                   # optional

    [custom_actions.upper]
    action = "uppercase"
    args = { scope = "keywords" }       # optional

    [[special_rules]]
    name = "full_line_comment"
    start = "*"
    start_column = 1                    # optional
    token_type = "Comment"

"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from rulelex.errors import ConfigParseError, InvalidRegexError, MissingFieldError

# Top-level sections every rule set must declare (imports is optional)
REQUIRED_SECTIONS = (
    "metadata",
    "token_categories",
    "patterns",
    "context_rules",
    "custom_actions",
    "special_rules",
)


# =========================================================================
# Schema validation helpers
# =========================================================================


def _require(data: Mapping[str, Any], key: str, where: str, path: str | None) -> Any:
    if key not in data:
        raise MissingFieldError(f"{where}.{key}" if where else key, path=path)
    return data[key]


def _expect(value: Any, kind: type | tuple[type, ...], where: str, path: str | None) -> Any:
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass; never accept it where a number is expected
    if not isinstance(value, kinds) or (isinstance(value, bool) and bool not in kinds):
        names = " or ".join(k.__name__ for k in kinds)
        raise ConfigParseError(
            f"{where} must be {names}, got {type(value).__name__}",
            path=path,
        )
    return value


def _optional(
    data: Mapping[str, Any],
    key: str,
    kind: type | tuple[type, ...],
    where: str,
    path: str | None,
) -> Any:
    value = data.get(key)
    if value is None:
        return None
    return _expect(value, kind, f"{where}.{key}", path)


def _non_negative(value: int | None, where: str, path: str | None) -> int | None:
    if value is not None and value < 0:
        raise ConfigParseError(f"{where} must not be negative, got {value}", path=path)
    return value


# =========================================================================
# Shared records (identical in raw and compiled form)
# =========================================================================


@dataclass(frozen=True, slots=True)
class Metadata:
    """General information about a rule set.

    Attributes:
        language_version: Version tag of the target language; must be non-empty
        case_sensitive: When False, patterns are compiled with re.IGNORECASE
        allow_unicode_identifiers: When False, patterns are compiled with re.ASCII
    """

    language_version: str
    case_sensitive: bool = True
    allow_unicode_identifiers: bool = True

    @property
    def regex_flags(self) -> int:
        """re flags implied by the metadata switches."""
        flags = 0
        if not self.case_sensitive:
            flags |= re.IGNORECASE
        if not self.allow_unicode_identifiers:
            flags |= re.ASCII
        return flags

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str | None = None) -> Metadata:
        _expect(data, Mapping, "metadata", path)
        version = _expect(
            _require(data, "language_version", "metadata", path),
            str,
            "metadata.language_version",
            path,
        )
        case_sensitive = _optional(data, "case_sensitive", bool, "metadata", path)
        unicode_ids = _optional(data, "allow_unicode_identifiers", bool, "metadata", path)
        return cls(
            language_version=version,
            case_sensitive=True if case_sensitive is None else case_sensitive,
            allow_unicode_identifiers=True if unicode_ids is None else unicode_ids,
        )


@dataclass(frozen=True, slots=True)
class CategoryConfig:
    """Priority and display color of a token category.

    Lower priority values are tried first. Values need not be unique.
    """

    priority: int
    color: str

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], where: str, path: str | None = None
    ) -> CategoryConfig:
        _expect(data, Mapping, where, path)
        priority = _expect(_require(data, "priority", where, path), int, f"{where}.priority", path)
        color = _expect(_require(data, "color", where, path), str, f"{where}.color", path)
        _non_negative(priority, f"{where}.priority", path)
        return cls(priority=priority, color=color)


@dataclass(frozen=True, slots=True)
class ContextRule:
    """Delimiters of a context-sensitive region (e.g. a string literal).

    Context rules are carried through compilation and merging for callers
    to inspect; the scan loop itself does not consult them.
    """

    start: str
    end: str
    escape: str | None = None
    multiline: bool | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], where: str, path: str | None = None) -> ContextRule:
        _expect(data, Mapping, where, path)
        return cls(
            start=_expect(_require(data, "start", where, path), str, f"{where}.start", path),
            end=_expect(_require(data, "end", where, path), str, f"{where}.end", path),
            escape=_optional(data, "escape", str, where, path),
            multiline=_optional(data, "multiline", bool, where, path),
        )


@dataclass(frozen=True, slots=True)
class CustomAction:
    """A named action with optional string arguments."""

    action: str
    args: dict[str, str] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], where: str, path: str | None = None) -> CustomAction:
        _expect(data, Mapping, where, path)
        action = _expect(_require(data, "action", where, path), str, f"{where}.action", path)
        args = _optional(data, "args", Mapping, where, path)
        if args is not None:
            args = {
                _expect(k, str, f"{where}.args key", path): _expect(
                    v, str, f"{where}.args.{k}", path
                )
                for k, v in args.items()
            }
        return cls(action=action, args=args)


# =========================================================================
# Patterns
# =========================================================================


@dataclass(frozen=True, slots=True)
class RawPattern:
    """A pattern as authored: regex source text plus optional subcategory."""

    regex: str
    subcategory: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], where: str, path: str | None = None) -> RawPattern:
        _expect(data, Mapping, where, path)
        return cls(
            regex=_expect(_require(data, "regex", where, path), str, f"{where}.regex", path),
            subcategory=_optional(data, "subcategory", str, where, path),
        )


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A pattern ready for matching."""

    regex: re.Pattern[str]
    subcategory: str | None = None

    @property
    def source(self) -> str:
        """The pattern source text this was compiled from."""
        return self.regex.pattern


# =========================================================================
# Special rules
# =========================================================================


@dataclass(frozen=True, slots=True)
class RawSpecialRule:
    """A special rule as authored.

    Every attribute except ``name``, ``start`` and ``token_type`` is an
    optional constraint; see rulelex.lexer.special for how constraints are
    intersected at match time.
    """

    name: str
    start: str
    token_type: str
    end: str | None = None
    start_column: int | None = None
    min_length: int | None = None
    regex: str | None = None

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], where: str, path: str | None = None
    ) -> RawSpecialRule:
        _expect(data, Mapping, where, path)
        start_column = _optional(data, "start_column", int, where, path)
        min_length = _optional(data, "min_length", int, where, path)
        return cls(
            name=_expect(_require(data, "name", where, path), str, f"{where}.name", path),
            start=_expect(_require(data, "start", where, path), str, f"{where}.start", path),
            token_type=_expect(
                _require(data, "token_type", where, path), str, f"{where}.token_type", path
            ),
            end=_optional(data, "end", str, where, path),
            start_column=_non_negative(start_column, f"{where}.start_column", path),
            min_length=_non_negative(min_length, f"{where}.min_length", path),
            regex=_optional(data, "regex", str, where, path),
        )


@dataclass(frozen=True, slots=True)
class SpecialRule:
    """A compiled special rule.

    Same attributes as RawSpecialRule minus ``name``. When ``regex`` is
    present, ``pattern`` holds its compiled form. compile_config passes a
    pattern compiled with the rule set's metadata flags; a rule built
    directly without one has ``regex`` compiled here with no flags.

    Raises:
        InvalidRegexError: If ``regex`` is given without ``pattern`` and
            does not compile
    """

    start: str
    token_type: str
    end: str | None = None
    start_column: int | None = None
    min_length: int | None = None
    regex: str | None = None
    pattern: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.regex is None or self.pattern is not None:
            return
        try:
            compiled = re.compile(self.regex)
        except re.error as exc:
            raise InvalidRegexError(self.regex, str(exc)) from exc
        object.__setattr__(self, "pattern", compiled)


# =========================================================================
# Raw rule set
# =========================================================================


@dataclass(frozen=True, slots=True)
class RawRuleSet:
    """A rule set exactly as deserialized, before compilation.

    Transient: consumed once by rulelex.config.compile_config.
    """

    metadata: Metadata
    token_categories: dict[str, CategoryConfig]
    patterns: dict[str, list[RawPattern]]
    context_rules: dict[str, ContextRule] = field(default_factory=dict)
    custom_actions: dict[str, CustomAction] = field(default_factory=dict)
    special_rules: list[RawSpecialRule] = field(default_factory=list)
    imports: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str | None = None) -> RawRuleSet:
        """Validate and convert a deserialized document.

        Args:
            data: Document as produced by a TOML (or equivalent) parser
            path: Identity of the source, used in error messages

        Raises:
            MissingFieldError: If a required section or field is absent
            ConfigParseError: If a value has the wrong shape
        """
        _expect(data, Mapping, "rule set", path)
        for section in REQUIRED_SECTIONS:
            _require(data, section, "", path)

        categories = {
            name: CategoryConfig.from_dict(entry, f"token_categories.{name}", path)
            for name, entry in _expect(
                data["token_categories"], Mapping, "token_categories", path
            ).items()
        }

        patterns: dict[str, list[RawPattern]] = {}
        for category, entries in _expect(data["patterns"], Mapping, "patterns", path).items():
            _expect(entries, list, f"patterns.{category}", path)
            patterns[category] = [
                RawPattern.from_dict(entry, f"patterns.{category}[{i}]", path)
                for i, entry in enumerate(entries)
            ]

        context_rules = {
            name: ContextRule.from_dict(entry, f"context_rules.{name}", path)
            for name, entry in _expect(data["context_rules"], Mapping, "context_rules", path).items()
        }
        custom_actions = {
            name: CustomAction.from_dict(entry, f"custom_actions.{name}", path)
            for name, entry in _expect(
                data["custom_actions"], Mapping, "custom_actions", path
            ).items()
        }
        special_rules = [
            RawSpecialRule.from_dict(entry, f"special_rules[{i}]", path)
            for i, entry in enumerate(_expect(data["special_rules"], list, "special_rules", path))
        ]

        imports = data.get("imports")
        if imports is not None:
            _expect(imports, list, "imports", path)
            imports = [_expect(item, str, "imports[]", path) for item in imports]

        return cls(
            metadata=Metadata.from_dict(data["metadata"], path),
            token_categories=categories,
            patterns=patterns,
            context_rules=context_rules,
            custom_actions=custom_actions,
            special_rules=special_rules,
            imports=imports,
        )
