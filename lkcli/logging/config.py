"""
Logging configuration for lkcli.

Everything lkcli logs goes through the ``lkcli`` logger tree:
- a colored stderr handler, so stdout stays reserved for command output
- an optional rotating file handler (``lkcli.log``) when a log directory is set
- a process-wide debug flag toggled by ``--verbose``

HTTP client libraries are kept at WARNING so request chatter does not
drown the bootstrap progress.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional, Union

PACKAGE_LOGGER = "lkcli"
LOG_FILE_NAME = "lkcli.log"

# Levels forced on third-party loggers
_QUIET_LIBRARIES = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s.%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"

_LEVEL_COLORS = {
    "DEBUG": "\033[94m",
    "INFO": "\033[92m",
    "WARNING": "\033[93m",
    "ERROR": "\033[91m",
    "CRITICAL": "\033[91m\033[1m",
}
_RESET = "\033[0m"

_debug_enabled = False


class ColorFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    def format(self, record):
        color = _LEVEL_COLORS.get(record.levelname)
        if color is None:
            return super().format(record)
        # Color a copy so other handlers see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{_RESET}"
        return super().format(colored)


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for ``name``.

    Loggers of the quieted HTTP libraries get their forced level applied.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        The logger
    """
    logger = logging.getLogger(name)
    library = name.split(".", 1)[0]
    if library in _QUIET_LIBRARIES:
        logger.setLevel(_QUIET_LIBRARIES[library])
    return logger


def set_debug_mode(enabled: bool) -> None:
    """
    Switch debug logging for the lkcli tree on or off.

    Args:
        enabled: True to log DEBUG records, False to go back to INFO
    """
    global _debug_enabled
    if enabled == _debug_enabled:
        return
    _debug_enabled = enabled

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if enabled else logging.INFO)
    if enabled:
        package_logger.debug("Debug mode enabled")


def is_debug_mode() -> bool:
    """Whether debug logging is on."""
    return _debug_enabled


def _console_handler(level: int, fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ColorFormatter(fmt))
    return handler


def _file_handler(
    log_dir: Path, level: int, fmt: str, max_bytes: int, backup_count: int
) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / LOG_FILE_NAME,
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    log_dir: Optional[Union[str, Path]] = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    max_file_size_mb: int = 5,
    backup_count: int = 3,
    config: Optional[dict[str, Any]] = None,
) -> None:
    """
    Configure handlers for the lkcli logger tree.

    Safe to call repeatedly: previously installed handlers are closed and
    replaced. Loggers outside the tree are left alone, apart from the
    quieted HTTP libraries.

    Args:
        log_dir: Directory for ``lkcli.log``; no file logging when None
        console_level: Level of the stderr handler
        file_level: Level of the file handler
        max_file_size_mb: Size at which the log file rotates
        backup_count: Rotated files to keep
        config: Optional overrides: ``console_format``, ``file_format``
            and ``debug_mode``
    """
    options = config or {}

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.addHandler(
        _console_handler(console_level, options.get("console_format", _CONSOLE_FORMAT))
    )
    if log_dir:
        package_logger.addHandler(
            _file_handler(
                Path(log_dir),
                file_level,
                options.get("file_format", _FILE_FORMAT),
                max_file_size_mb * 1024 * 1024,
                backup_count,
            )
        )

    for library, level in _QUIET_LIBRARIES.items():
        logging.getLogger(library).setLevel(level)

    debug = bool(options.get("debug_mode", _debug_enabled))
    set_debug_mode(debug)
    if not debug:
        # The file handler wants DEBUG records even when the console does not
        package_logger.setLevel(logging.DEBUG if log_dir else logging.INFO)

    package_logger.debug(
        f"Logging configured (console={logging.getLevelName(console_level)}, "
        f"file={Path(log_dir) / LOG_FILE_NAME if log_dir else 'off'})"
    )
