"""Shared fixtures for rulelex tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from rulelex import (
    CategoryConfig,
    CompiledConfig,
    ContextRule,
    CustomAction,
    Metadata,
    RawPattern,
    RawRuleSet,
    RawSpecialRule,
    compile_config,
)

EXAMPLE_RULES = Path(__file__).resolve().parent.parent / "examples" / "rules"


def build_raw(
    categories: dict[str, int] | None = None,
    patterns: dict[str, list[str | tuple[str, str]]] | None = None,
    special_rules: list[dict[str, Any]] | None = None,
    context_rules: dict[str, ContextRule] | None = None,
    custom_actions: dict[str, CustomAction] | None = None,
    imports: list[str] | None = None,
    language_version: str = "1.0",
    **metadata: bool,
) -> RawRuleSet:
    """Build a RawRuleSet from compact arguments.

    ``categories`` maps name to priority. Pattern entries are a regex or a
    (regex, subcategory) pair. Special rules are keyword dicts; ``name``
    defaults to ``rule<N>``.
    """
    raw_patterns = {
        category: [
            RawPattern(entry) if isinstance(entry, str) else RawPattern(entry[0], entry[1])
            for entry in entries
        ]
        for category, entries in (patterns or {}).items()
    }
    rules = [
        RawSpecialRule(**{"name": f"rule{i}", **spec})
        for i, spec in enumerate(special_rules or [])
    ]
    return RawRuleSet(
        metadata=Metadata(language_version=language_version, **metadata),
        token_categories={
            name: CategoryConfig(priority=priority, color="white")
            for name, priority in (categories or {}).items()
        },
        patterns=raw_patterns,
        context_rules=dict(context_rules or {}),
        custom_actions=dict(custom_actions or {}),
        special_rules=rules,
        imports=imports,
    )


@pytest.fixture
def make_config() -> Callable[..., CompiledConfig]:
    """Factory fixture: same arguments as build_raw, returns a compiled config."""

    def factory(**kwargs: Any) -> CompiledConfig:
        return compile_config(build_raw(**kwargs))

    return factory


@pytest.fixture
def make_raw() -> Callable[..., RawRuleSet]:
    """Factory fixture returning an uncompiled RawRuleSet."""
    return build_raw


@pytest.fixture
def example_rules() -> Path:
    """Directory holding the bundled example rule sets."""
    return EXAMPLE_RULES
