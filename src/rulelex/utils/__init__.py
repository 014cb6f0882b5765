"""Utility modules for rulelex.

Provides:
- logger: get_logger for namespaced logging
- text: utf8_width and describe_char for cursor bookkeeping and messages
"""

from rulelex.utils.logger import get_logger
from rulelex.utils.text import describe_char, utf8_width

__all__ = [
    "describe_char",
    "get_logger",
    "utf8_width",
]
