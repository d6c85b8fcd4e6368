"""Minimal logging utilities for Pespunte.

Provides a simple get_logger function that wraps the standard library logging.
All loggers live under the "pespunte" namespace and no handlers are installed.

What the library emits:
    pespunte.rewriter  DEBUG    edit region opened / closed (event index, span)
    pespunte.rewriter  WARNING  edit region still open at end of document
                                (UnterminatedPolicy.HAND_TO_CALLBACK only)

To see region tracing:
    logging.getLogger("pespunte").setLevel(logging.DEBUG)

Example:
    >>> from pespunte.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Opened edit region at %d", 42)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "pespunte." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("driver")
        >>> logger.name
        'pespunte.driver'
    """
    if not (name == "pespunte" or name.startswith("pespunte.")):
        name = f"pespunte.{name}"
    return logging.getLogger(name)
