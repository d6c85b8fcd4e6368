"""Utility modules for Pespunte.

Provides:
- logger: get_logger for logging
"""

from pespunte.utils.logger import get_logger

__all__ = [
    "get_logger",
]
