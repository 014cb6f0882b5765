"""Rule-set compilation and merging.

compile_config turns a RawRuleSet into a CompiledConfig: every pattern
source text is compiled, mandatory fields are validated, and special rules
lose their ``name``. Compilation is all-or-nothing.

Usage:
    >>> from rulelex.config import compile_config
    >>> config = compile_config(raw)
    >>> config.merge(compile_config(other_raw))
    >>> lexer = Lexer(source, config)

Thread Safety:
    CompiledConfig exposes mutators (merge, add_*) for assembling a
    configuration before scanning starts. Lexers only read it, so a
    configuration that is no longer being assembled is safe to share
    across lexers and threads.

"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from rulelex.errors import ConfigurationError, InvalidRegexError, MissingFieldError
from rulelex.rules import (
    CategoryConfig,
    CompiledPattern,
    ContextRule,
    CustomAction,
    Metadata,
    RawRuleSet,
    SpecialRule,
)
from rulelex.utils.logger import get_logger

logger = get_logger(__name__)


def _compile_regex(source: str, flags: int, path: str | None) -> re.Pattern[str]:
    try:
        return re.compile(source, flags)
    except re.error as exc:
        raise InvalidRegexError(source, str(exc), path=path) from exc


def _check_type_name(name: str, where: str, path: str | None) -> None:
    # Token types render as "category:subcategory"
    if ":" in name:
        raise ConfigurationError(f"{where} {name!r} must not contain ':'", path=path)


class CompiledConfig:
    """Compiled, ready-to-scan configuration.

    Built by compile_config (or CompiledConfig.from_raw). Holds the same
    sections as RawRuleSet with patterns compiled and special-rule names
    dropped.

    Merge policy (see merge) is deliberately asymmetric: categories keep
    the first definition, context rules and custom actions keep the last.
    """

    __slots__ = (
        "_metadata",
        "_token_categories",
        "_patterns",
        "_context_rules",
        "_custom_actions",
        "_imports",
        "_special_rules",
    )

    def __init__(
        self,
        metadata: Metadata,
        token_categories: dict[str, CategoryConfig] | None = None,
        patterns: dict[str, list[CompiledPattern]] | None = None,
        context_rules: dict[str, ContextRule] | None = None,
        custom_actions: dict[str, CustomAction] | None = None,
        imports: list[str] | None = None,
        special_rules: list[SpecialRule] | None = None,
    ) -> None:
        """Initialize from already-compiled parts.

        Use compile_config to build one from a RawRuleSet.
        """
        self._metadata = metadata
        self._token_categories: dict[str, CategoryConfig] = dict(token_categories or {})
        self._patterns: dict[str, list[CompiledPattern]] = {
            category: list(entries) for category, entries in (patterns or {}).items()
        }
        self._context_rules: dict[str, ContextRule] = dict(context_rules or {})
        self._custom_actions: dict[str, CustomAction] = dict(custom_actions or {})
        self._imports = list(imports) if imports is not None else None
        self._special_rules: list[SpecialRule] = list(special_rules or [])

    @classmethod
    def from_raw(cls, raw: RawRuleSet, path: str | None = None) -> CompiledConfig:
        """Compile a RawRuleSet. See compile_config."""
        return compile_config(raw, path=path)

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def metadata(self) -> Metadata:
        return self._metadata

    @property
    def token_categories(self) -> Mapping[str, CategoryConfig]:
        return MappingProxyType(self._token_categories)

    @property
    def patterns(self) -> Mapping[str, tuple[CompiledPattern, ...]]:
        """Compiled patterns per category. Use add_pattern to change them."""
        return MappingProxyType(
            {name: tuple(entries) for name, entries in self._patterns.items()}
        )

    @property
    def context_rules(self) -> Mapping[str, ContextRule]:
        return MappingProxyType(self._context_rules)

    @property
    def custom_actions(self) -> Mapping[str, CustomAction]:
        return MappingProxyType(self._custom_actions)

    @property
    def imports(self) -> tuple[str, ...] | None:
        return tuple(self._imports) if self._imports is not None else None

    @property
    def special_rules(self) -> tuple[SpecialRule, ...]:
        """Special rules in declaration order (first valid rule wins)."""
        return tuple(self._special_rules)

    def ordered_categories(self) -> list[str]:
        """Category names in scan order: ascending priority, then name.

        The name tiebreak keeps equal-priority categories in a stable order
        regardless of how the mappings were built or merged.
        """
        return sorted(
            self._token_categories,
            key=lambda name: (self._token_categories[name].priority, name),
        )

    # =========================================================================
    # Lookup and upsert
    # =========================================================================

    def get_patterns(self, category: str) -> tuple[CompiledPattern, ...] | None:
        """Get the compiled patterns of a category, in declaration order."""
        entries = self._patterns.get(category)
        return tuple(entries) if entries is not None else None

    def add_pattern(self, category: str, pattern: CompiledPattern) -> None:
        """Append a compiled pattern to a category."""
        self._patterns.setdefault(category, []).append(pattern)

    def get_context_rule(self, name: str) -> ContextRule | None:
        return self._context_rules.get(name)

    def add_context_rule(self, name: str, rule: ContextRule) -> None:
        """Add or replace a context rule."""
        self._context_rules[name] = rule

    def get_custom_action(self, name: str) -> CustomAction | None:
        return self._custom_actions.get(name)

    def add_custom_action(self, name: str, action: CustomAction) -> None:
        """Add or replace a custom action."""
        self._custom_actions[name] = action

    def extend_special_rules(self, rules: Iterable[SpecialRule]) -> None:
        """Append special rules after the existing ones.

        merge() does not combine special rules; callers that need the rules
        of several configurations call this explicitly.
        """
        self._special_rules.extend(rules)

    # =========================================================================
    # Merging
    # =========================================================================

    def merge(self, other: CompiledConfig) -> None:
        """Merge another configuration into this one.

        - Token categories: existing entries win; new names are added.
        - Patterns: per-category concatenation (this config's first), no de-dup.
        - Context rules and custom actions: entries from ``other`` replace
          same-named entries here.
        - Special rules, metadata and imports: left untouched.

        Raises:
            ConfigError: Reserved for future validation; never raised today.
        """
        added = 0
        for name, category in other._token_categories.items():
            if name not in self._token_categories:
                self._token_categories[name] = category
                added += 1

        for name, entries in other._patterns.items():
            self._patterns.setdefault(name, []).extend(entries)

        self._context_rules.update(other._context_rules)
        self._custom_actions.update(other._custom_actions)

        logger.debug(
            "Merged config %r into %r: %d new categories, %d pattern lists",
            other._metadata.language_version,
            self._metadata.language_version,
            added,
            len(other._patterns),
        )

    def __repr__(self) -> str:
        return (
            f"CompiledConfig(language_version={self._metadata.language_version!r}, "
            f"categories={len(self._token_categories)}, "
            f"patterns={sum(len(p) for p in self._patterns.values())}, "
            f"special_rules={len(self._special_rules)})"
        )


def compile_config(raw: RawRuleSet, path: str | None = None) -> CompiledConfig:
    """Compile a raw rule set.

    Args:
        raw: Deserialized rule set
        path: Identity of the rule-set source, used in error messages

    Returns:
        A new CompiledConfig

    Raises:
        MissingFieldError: If metadata.language_version is empty
        InvalidRegexError: On the first pattern that does not compile
        ConfigurationError: If a category or token type name contains ':'
    """
    if not raw.metadata.language_version:
        raise MissingFieldError("language_version", path=path)

    flags = raw.metadata.regex_flags

    for name in raw.token_categories:
        _check_type_name(name, "token category", path)

    patterns: dict[str, list[CompiledPattern]] = {}
    for category, raw_patterns in raw.patterns.items():
        _check_type_name(category, "pattern category", path)
        compiled = []
        for raw_pattern in raw_patterns:
            if raw_pattern.subcategory is not None:
                _check_type_name(raw_pattern.subcategory, "subcategory", path)
            compiled.append(
                CompiledPattern(
                    regex=_compile_regex(raw_pattern.regex, flags, path),
                    subcategory=raw_pattern.subcategory,
                )
            )
        patterns[category] = compiled

    special_rules = []
    for rule in raw.special_rules:
        _check_type_name(rule.token_type, "special rule token_type", path)
        special_rules.append(
            SpecialRule(
                start=rule.start,
                token_type=rule.token_type,
                end=rule.end,
                start_column=rule.start_column,
                min_length=rule.min_length,
                regex=rule.regex,
                pattern=_compile_regex(rule.regex, flags, path) if rule.regex is not None else None,
            )
        )

    config = CompiledConfig(
        metadata=raw.metadata,
        token_categories=raw.token_categories,
        patterns=patterns,
        context_rules=raw.context_rules,
        custom_actions=raw.custom_actions,
        imports=raw.imports,
        special_rules=special_rules,
    )
    logger.debug("Compiled %r", config)
    return config
