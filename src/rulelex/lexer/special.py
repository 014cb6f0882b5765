"""Special-rule matcher mixin.

A special rule matches when every constraint it declares holds. Each
constraint either rejects the rule or contributes an upper bound on the
match length; the match length is the minimum of those bounds. Constraints
that only gate validity contribute the whole remaining length, so they
never shorten a match.

Constraints run in the fixed order of CONSTRAINTS and stop at the first
rejection. ``start`` runs first, so ``end`` only ever searches text that
begins with the start marker.

Evaluators read the source in place from the cursor index; the remaining
input is never copied.

A rule with neither ``end`` nor ``regex`` has no bound except the input
itself: it consumes everything that remains. This is how "rest of line"
rules written with ``start_column`` alone end up swallowing the rest of the
buffer, so pair them with ``regex`` (e.g. ``[^\\n]*``) when that is not wanted.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

from rulelex.rules import SpecialRule
from rulelex.tokens import TokenType
from rulelex.utils.logger import get_logger

logger = get_logger(__name__)


def validate_start(source: str, index: int, rule: SpecialRule, column: int) -> int | None:
    """Input at the cursor must begin with the start marker."""
    if source.startswith(rule.start, index):
        return len(source) - index
    return None


def validate_end(source: str, index: int, rule: SpecialRule, column: int) -> int | None:
    """Bound the match just past the first end marker after the start marker."""
    found = source.find(rule.end, index + len(rule.start))
    if found == -1:
        return None
    return found - index + len(rule.end)


def validate_regex(source: str, index: int, rule: SpecialRule, column: int) -> int | None:
    """Pattern must match at the cursor; bound the match at its end."""
    match = rule.pattern.match(source, index)
    if match is None:
        return None
    return match.end() - index


def validate_min_length(source: str, index: int, rule: SpecialRule, column: int) -> int | None:
    """The whole remaining input (not the token) must be long enough."""
    remaining = len(source) - index
    if remaining >= rule.min_length:
        return remaining
    return None


def validate_start_column(source: str, index: int, rule: SpecialRule, column: int) -> int | None:
    """The cursor must sit exactly at the required column."""
    if column == rule.start_column:
        return len(source) - index
    return None


class Constraint(NamedTuple):
    """A named special-rule constraint."""

    name: str
    is_present: Callable[[SpecialRule], bool]
    validate: Callable[[str, int, SpecialRule, int], int | None]


# Evaluation order; "start" must stay first
CONSTRAINTS: tuple[Constraint, ...] = (
    Constraint("start", lambda rule: rule.start is not None, validate_start),
    Constraint("end", lambda rule: rule.end is not None, validate_end),
    Constraint("regex", lambda rule: rule.regex is not None, validate_regex),
    Constraint("min_length", lambda rule: rule.min_length is not None, validate_min_length),
    Constraint("start_column", lambda rule: rule.start_column is not None, validate_start_column),
)


def special_rule_length(source: str, index: int, rule: SpecialRule, column: int) -> int | None:
    """Intersect the present constraints of ``rule``.

    Args:
        source: The whole input
        index: Cursor character index into ``source``
        rule: The rule to evaluate
        column: Current cursor column (1-indexed)

    Returns:
        Match length in characters, or None if any present constraint fails.
    """
    length = len(source) - index
    for constraint in CONSTRAINTS:
        if not constraint.is_present(rule):
            continue
        bound = constraint.validate(source, index, rule, column)
        if bound is None:
            return None
        length = min(length, bound)
    return length


class SpecialRuleMatcherMixin:
    """Mixin providing special-rule matching.

    Pure logic: reads the cursor, never moves it.
    """

    # These will be set by the Lexer class
    _source: str
    _index: int
    _col: int
    _special_rules: tuple[tuple[SpecialRule, TokenType], ...]

    def _check_special_rules(self) -> tuple[TokenType, int] | None:
        """Find the first special rule, in declaration order, that matches.

        Returns:
            (token type, length in characters) of the first valid rule, or None.
        """
        for rule, token_type in self._special_rules:
            length = special_rule_length(self._source, self._index, rule, self._col)
            if length is None:
                continue
            if length == 0:
                # An empty match would stall the cursor
                logger.debug("Special rule %s matched empty text, skipped", token_type)
                continue
            return token_type, length
        return None
