"""Configuration-driven scan engine for rulelex.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer
├── core.py              # Lexer class (cursor, scan loop, fallback)
├── special.py           # Special-rule constraints and matcher mixin
└── patterns.py          # Priority-ordered pattern matcher mixin

Usage:
    >>> from rulelex.lexer import Lexer
    >>> lexer = Lexer("/* x */ rest", config)
    >>> for token in lexer.tokenize():
    ...     print(token)
    Token(Comment, '/* x */', 1:1)
    Token(Identifier, 'rest', 1:9)

"""

from rulelex.lexer.core import Lexer

__all__ = ["Lexer"]
