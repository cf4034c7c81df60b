"""
Logging system for lkcli.

This module provides the centralized logging configuration used by the
bootstrap core and the CLI.
"""

from lkcli.logging.config import (
    configure_logging,
    get_logger,
    is_debug_mode,
    set_debug_mode,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "set_debug_mode",
    "is_debug_mode",
]
