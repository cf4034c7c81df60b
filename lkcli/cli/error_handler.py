"""
Error handling for CLI commands.

Every command funnels failures through ``handle_cli_error``, which prints
the error, optionally the subcommand help, and exits with status 1.
"""

from typing import NoReturn, Optional

import typer

from lkcli.cli.output import error_console, print_error
from lkcli.errors import (
    ConfigurationError,
    LkError,
    TaskExecutionError,
)
from lkcli.logging import get_logger

logger = get_logger(__name__)


def handle_cli_error(
    e: Exception,
    ctx: Optional[typer.Context] = None,
    verbose: bool = False,
) -> NoReturn:
    """
    Report an error and terminate the command.

    Args:
        e: Exception that occurred
        ctx: Command context, used to print help for configuration errors
        verbose: Whether to log the traceback

    Raises:
        typer.Exit: Always, with code 1
    """
    if isinstance(e, LkError):
        print_error(e.message, e.suggestion)

        # Empty when the task streamed its output; clone output is printed by the cloner
        if isinstance(e, TaskExecutionError) and e.output:
            error_console.print(e.output, markup=False, highlight=False)

        if isinstance(e, ConfigurationError) and e.show_help and ctx is not None:
            error_console.print()
            error_console.print(ctx.get_help(), markup=False, highlight=False)

        logger.debug(f"{type(e).__name__}: {e.to_dict()}")
    else:
        print_error(str(e) or type(e).__name__)

    if verbose:
        logger.error(f"CLI error: {str(e)}", exc_info=True)

    raise typer.Exit(code=1)
