"""Tests for special-rule matching.

A special rule matches when all of its declared constraints hold; its
length is the minimum of the bounds they contribute. Special rules are
tried before category patterns, in declaration order.
"""

import re
from collections.abc import Callable

import pytest

from rulelex import CompiledConfig, Lexer, Metadata, Token
from rulelex.errors import InvalidRegexError
from rulelex.lexer.special import (
    CONSTRAINTS,
    special_rule_length,
    validate_end,
    validate_min_length,
    validate_regex,
    validate_start,
    validate_start_column,
)
from rulelex.rules import SpecialRule


def next_token(lexer: Lexer) -> Token:
    token = lexer.next_token()
    assert token is not None
    return token


class TestConstraintEvaluators:
    """Each evaluator rejects (None) or returns an upper bound."""

    def test_start(self) -> None:
        rule = SpecialRule(start="/*", token_type="C")
        assert validate_start("/* x */", 0, rule, 1) == 7
        assert validate_start("x /*", 0, rule, 1) is None

    def test_end_counts_from_after_start(self) -> None:
        rule = SpecialRule(start="/*", end="*/", token_type="C")
        assert validate_end("/* x */rest", 0, rule, 1) == 7

    def test_end_does_not_reuse_start_marker(self) -> None:
        """``/*/`` has no end marker once the start marker is skipped."""
        rule = SpecialRule(start="/*", end="*/", token_type="C")
        assert validate_end("/*/", 0, rule, 1) is None

    def test_end_missing(self) -> None:
        rule = SpecialRule(start="/*", end="*/", token_type="C")
        assert validate_end("/* never closed", 0, rule, 1) is None

    def test_regex_anchored(self) -> None:
        rule = SpecialRule(start="", regex="b+", pattern=re.compile("b+"), token_type="B")
        assert validate_regex("bbx", 0, rule, 1) == 2
        assert validate_regex("abb", 0, rule, 1) is None

    def test_min_length_uses_remaining_input(self) -> None:
        rule = SpecialRule(start="", min_length=5, token_type="C")
        assert validate_min_length("12345", 0, rule, 1) == 5
        assert validate_min_length("1234", 0, rule, 1) is None

    def test_start_column(self) -> None:
        rule = SpecialRule(start="*", start_column=1, token_type="C")
        assert validate_start_column("* c", 0, rule, 1) == 3
        assert validate_start_column("* c", 0, rule, 2) is None

    def test_fixed_order(self) -> None:
        assert [c.name for c in CONSTRAINTS] == [
            "start",
            "end",
            "regex",
            "min_length",
            "start_column",
        ]

    def test_start_short_circuits(self) -> None:
        """A failed start check rejects the rule before end is searched."""
        rule = SpecialRule(start="ééé", end="x", token_type="C")
        assert special_rule_length("abcx", 0, rule, 1) is None

    def test_length_is_minimum_of_bounds(self) -> None:
        rule = SpecialRule(
            start="<",
            end=">",
            regex="<[a-z]*",
            pattern=re.compile("<[a-z]*"),
            token_type="T",
        )
        # end bound 5, regex bound 4
        assert special_rule_length("<abc>>", 0, rule, 1) == 4

    def test_bounds_relative_to_cursor_index(self) -> None:
        """Evaluators read in place; bounds count from the cursor, not 0."""
        rule = SpecialRule(start="/*", end="*/", min_length=4, token_type="C")
        source = "ab /* x */ cd"
        assert validate_start(source, 3, rule, 4) == 10
        assert validate_end(source, 3, rule, 4) == 7
        assert validate_min_length(source, 3, rule, 4) == 10
        assert special_rule_length(source, 3, rule, 4) == 7
        assert validate_start(source, 0, rule, 1) is None

    def test_end_marker_before_cursor_ignored(self) -> None:
        rule = SpecialRule(start="/*", end="*/", token_type="C")
        assert validate_end("*/ /* open", 3, rule, 4) is None

    def test_regex_matches_at_cursor_index(self) -> None:
        rule = SpecialRule(start="", regex="b+", token_type="B")
        assert validate_regex("aabbx", 2, rule, 3) == 2
        assert validate_regex("aabbx", 1, rule, 2) is None


class TestDirectlyBuiltRules:
    """A SpecialRule built without compile_config still honors its regex."""

    def test_regex_compiled_when_pattern_missing(self) -> None:
        rule = SpecialRule(start="*", regex=r"\*[^\n]*", token_type="Comment")
        assert rule.pattern is not None
        assert rule.pattern.pattern == r"\*[^\n]*"

    def test_explicit_pattern_kept(self) -> None:
        pattern = re.compile("a+", re.IGNORECASE)
        rule = SpecialRule(start="a", regex="a+", pattern=pattern, token_type="A")
        assert rule.pattern is pattern

    def test_invalid_regex_rejected(self) -> None:
        with pytest.raises(InvalidRegexError) as exc_info:
            SpecialRule(start="(", regex="(", token_type="Paren")
        assert exc_info.value.pattern == "("

    def test_regex_bounds_hand_built_rule(self) -> None:
        rule = SpecialRule(start="*", regex=r"\*[^\n]*", token_type="Comment")
        config = CompiledConfig(Metadata("1"), special_rules=[rule])
        lexer = Lexer("* a\nb c", config)
        assert next_token(lexer).value == "* a"

    def test_extended_rule_bounded(self, make_config: Callable[..., CompiledConfig]) -> None:
        config = make_config()
        config.extend_special_rules([SpecialRule(start='"', regex=r'"[^\n]*', token_type="C")])
        tokens = list(Lexer('"one\n"two', config).tokenize())
        assert [t.value for t in tokens] == ['"one', '"two']


class TestConstraintIntersection:
    """Rules validate all present constraints through the lexer."""

    def test_delimited_comment(self, make_config: Callable[..., CompiledConfig]) -> None:
        config = make_config(special_rules=[{"start": "/*", "end": "*/", "token_type": "Comment"}])
        lexer = Lexer("/* x */rest", config)
        token = next_token(lexer)
        assert token.value == "/* x */"
        assert token.type.category == "Comment"
        assert token.type.subcategory is None
        assert lexer.index == 7
        assert lexer.column == 8

    def test_end_and_min_length(self, make_config: Callable[..., CompiledConfig]) -> None:
        config = make_config(
            special_rules=[{"start": "/*", "end": "*/", "min_length": 3, "token_type": "Comment"}]
        )
        token = next_token(Lexer("/* */", config))
        assert token.value == "/* */"

    def test_min_length_checks_remaining_not_token(
        self, make_config: Callable[..., CompiledConfig]
    ) -> None:
        """The token may be shorter than min_length if the input is long enough."""
        config = make_config(
            special_rules=[{"start": "#", "regex": "#.", "min_length": 10, "token_type": "Pragma"}]
        )
        token = next_token(Lexer("#a and plenty more", config))
        assert token.value == "#a"
        short = next_token(Lexer("#a", config))
        assert short.category == "Unknown"

    def test_unterminated_end_falls_through(
        self, make_config: Callable[..., CompiledConfig]
    ) -> None:
        config = make_config(special_rules=[{"start": "/*", "end": "*/", "token_type": "Comment"}])
        token = next_token(Lexer("/* open", config))
        assert token.category == "Unknown"
        assert token.value == "/"

    def test_multiline_region_moves_lines(
        self, make_config: Callable[..., CompiledConfig]
    ) -> None:
        config = make_config(special_rules=[{"start": "/*", "end": "*/", "token_type": "Comment"}])
        lexer = Lexer("/* a\n b\n */x", config)
        token = next_token(lexer)
        assert token.value == "/* a\n b\n */"
        assert (lexer.line, lexer.column) == (3, 4)


class TestOpenEndedRules:
    """Without end or regex, a rule consumes the rest of the input."""

    def test_start_only_consumes_everything(
        self, make_config: Callable[..., CompiledConfig]
    ) -> None:
        config = make_config(special_rules=[{"start": "*", "token_type": "Comment"}])
        lexer = Lexer("* line one\nline two", config)
        token = next_token(lexer)
        assert token.value == "* line one\nline two"
        assert lexer.next_token() is None

    def test_column_anchored_with_regex_stops_at_newline(
        self, make_config: Callable[..., CompiledConfig]
    ) -> None:
        config = make_config(
            categories={"Word": 1},
            patterns={"Word": [r"\w+"]},
            special_rules=[
                {"start": "*", "start_column": 1, "regex": r"\*[^\n]*", "token_type": "Comment"}
            ],
        )
        tokens = list(Lexer("* note\nword", config).tokenize())
        assert [(t.category, t.value) for t in tokens] == [("Comment", "* note"), ("Word", "word")]


class TestColumnAnchoring:
    """start_column compares against the cursor column exactly."""

    def test_only_at_column(self, make_config: Callable[..., CompiledConfig]) -> None:
        config = make_config(
            special_rules=[
                {"start": "*", "start_column": 1, "regex": r"\*[^\n]*", "token_type": "Comment"}
            ],
        )
        tokens = list(Lexer("* a\n  * b", config).tokenize())
        assert tokens[0].category == "Comment"
        assert tokens[0].value == "* a"
        # Indented '*' is not in column 1
        assert tokens[1].category == "Unknown"
        assert tokens[1].value == "*"
        assert tokens[1].column == 3


class TestPrecedence:
    """Special rules run before patterns, in declaration order."""

    def test_special_rule_beats_pattern(self, make_config: Callable[..., CompiledConfig]) -> None:
        config = make_config(
            categories={"Operator": 0},
            patterns={"Operator": [r"\*+"]},
            special_rules=[{"start": "*", "regex": r"\*[^\n]*", "token_type": "Comment"}],
        )
        token = next_token(Lexer("** x", config))
        assert token.category == "Comment"
        assert token.value == "** x"

    def test_first_valid_rule_wins(self, make_config: Callable[..., CompiledConfig]) -> None:
        config = make_config(
            special_rules=[
                {"start": "#", "regex": "#", "token_type": "Short"},
                {"start": "#", "regex": "#+", "token_type": "Long"},
            ]
        )
        token = next_token(Lexer("###", config))
        assert token.category == "Short"
        assert token.value == "#"

    def test_invalid_rule_skipped(self, make_config: Callable[..., CompiledConfig]) -> None:
        config = make_config(
            special_rules=[
                {"start": "#", "start_column": 5, "token_type": "Never"},
                {"start": "#", "regex": "#!", "token_type": "Shebang"},
            ]
        )
        token = next_token(Lexer("#!", config))
        assert token.category == "Shebang"

    def test_empty_match_skipped(self, make_config: Callable[..., CompiledConfig]) -> None:
        """A rule that would match zero characters never stalls the cursor."""
        config = make_config(
            special_rules=[
                {"start": "", "regex": "x*", "token_type": "Empty"},
                {"start": "a", "regex": "a", "token_type": "A"},
            ]
        )
        tokens = list(Lexer("ab", config).tokenize())
        assert [(t.category, t.value) for t in tokens] == [("A", "a"), ("Unknown", "b")]


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("/*é*/", "/*é*/"),
        ("/*😀😀*/tail", "/*😀😀*/"),
    ],
)
def test_multibyte_delimited_regions(
    make_config: Callable[..., CompiledConfig], source: str, expected: str
) -> None:
    """Lengths are in characters, so multi-byte text never splits."""
    config = make_config(special_rules=[{"start": "/*", "end": "*/", "token_type": "Comment"}])
    lexer = Lexer(source, config)
    token = next_token(lexer)
    assert token.value == expected
    assert token.end_offset == len(expected.encode("utf-8"))
    assert lexer.position == token.end_offset
