"""CLI app entry point.

Provides the main Typer app with global flags for verbosity, input mode
and project credentials. State is stored in Typer context for commands
to access.
"""

import logging
import sys
from typing import Optional

import typer

from lkcli.cli.app_commands import app_app
from lkcli.cli.state import CLIState
from lkcli.config import get_settings
from lkcli.logging import configure_logging
from lkcli.version import get_version

app = typer.Typer(
    name="lk",
    help="lk - bootstrap applications from templates.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lk {get_version()}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logs and process output",
    ),
    no_input: bool = typer.Option(
        False,
        "--no-input",
        help="Never prompt; fail when a required value is missing",
    ),
    project: Optional[str] = typer.Option(
        None,
        "--project",
        help="Name of a configured project to use",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        help="Service URL",
        envvar="LIVEKIT_URL",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        help="API key",
        envvar="LIVEKIT_API_KEY",
    ),
    api_secret: Optional[str] = typer.Option(
        None,
        "--api-secret",
        help="API secret",
        envvar="LIVEKIT_API_SECRET",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """lk CLI - application bootstrap tooling."""
    configure_logging(
        log_dir=get_settings().log_dir,
        console_level=logging.DEBUG if verbose else logging.WARNING,
        config={"debug_mode": verbose},
    )

    # Create immutable state and store in context
    ctx.obj = CLIState(
        verbose=verbose,
        interactive=not no_input and sys.stdin.isatty(),
        project=project,
        url=url,
        api_key=api_key,
        api_secret=api_secret,
    )


app.add_typer(app_app, name="app")
