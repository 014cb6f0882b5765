"""Minimal logging utilities for rulelex.

Provides a get_logger function that wraps the standard library logging.
The library never installs handlers; applications configure logging.

Example:
    >>> from rulelex.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Compiled %d patterns", 12)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "rulelex." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'rulelex.mymodule'
    """
    if not (name == "rulelex" or name.startswith("rulelex.")):
        name = f"rulelex.{name}"
    return logging.getLogger(name)
