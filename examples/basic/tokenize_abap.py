"""Tokenize a small ABAP program with the bundled rule set."""

from pathlib import Path

from rulelex import load_config_with_imports, tokenize

RULES = Path(__file__).resolve().parent.parent / "rules" / "abap.toml"

SOURCE = """\
REPORT z_test_program. "start
*   Full-line comment.
    DATA: lv_number TYPE i VALUE 10,
          lv_text   TYPE string VALUE 'Hello, ABAP!'.

    WRITE: 'Number:', lv_number. "trailing comment
    IF lv_number > 5.
      WRITE: / 'Number is greater than 5'.
    ENDIF.
"""

config = load_config_with_imports(RULES)
for token in tokenize(SOURCE, config, source_file="z_test_program.abap"):
    print(f"{token.line:>3}:{token.column:<3} {str(token.type):<24} {token.value!r}")
