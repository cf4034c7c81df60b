"""
lkcli - application bootstrap tooling for the lk command line.

Creates new applications from templates, reconciles their environment
against project credentials and runs their lifecycle tasks.
"""

from lkcli.logging import (
    configure_logging,
    get_logger,
    is_debug_mode,
    set_debug_mode,
)
from lkcli.version import __version__

__all__ = [
    "__version__",
    "configure_logging",
    "get_logger",
    "is_debug_mode",
    "set_debug_mode",
]
