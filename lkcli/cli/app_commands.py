"""
Application bootstrap commands.

``lk app create`` bootstraps a new application from a template; the
hidden ``install``, ``run`` and ``env`` commands operate on an existing
application directory.
"""

from pathlib import Path
from typing import Optional

import typer

from lkcli.bootstrap import (
    BootstrapDriver,
    BootstrapSession,
    BootstrapState,
    CannedPrompter,
    ProjectResolver,
    Prompter,
    StagedCloner,
    TemplateCatalog,
    TemplateResolver,
    create_access_token,
)
from lkcli.cli.error_handler import handle_cli_error
from lkcli.cli.output import echo, print_next_steps, print_success, with_spinner
from lkcli.cli.prompter import RichPrompter
from lkcli.cli.state import CLIState
from lkcli.config import get_settings
from lkcli.config.settings import DEFAULT_TEMPLATE_BASE_URL
from lkcli.errors import LkError
from lkcli.logging import get_logger

logger = get_logger(__name__)

app_app = typer.Typer(
    name="app",
    help="Bootstrap and manage applications built from templates",
    no_args_is_help=True,
)

# Failures in these states leave the cloned application directory in place
_AFTER_CLONE = (
    BootstrapState.RECONCILING_ENV,
    BootstrapState.INSTALLING,
    BootstrapState.POST_CREATING,
)


def _state(ctx: typer.Context) -> CLIState:
    return ctx.obj if isinstance(ctx.obj, CLIState) else CLIState()


def build_prompter(state: CLIState) -> Prompter:
    """Interactive prompter for terminals, canned defaults otherwise."""
    if state.interactive:
        return RichPrompter()
    return CannedPrompter()


def build_driver(state: CLIState) -> BootstrapDriver:
    """Wire the bootstrap driver with the default collaborators."""
    settings = get_settings()
    projects = ProjectResolver(
        settings.config_path,
        project=state.project,
        url=state.url,
        api_key=state.api_key,
        api_secret=state.api_secret,
    )
    resolver = TemplateResolver(
        TemplateCatalog(settings.template_index_url, timeout=settings.http_timeout),
        token_factory=lambda project: create_access_token(
            project, ttl_seconds=settings.token_ttl_seconds
        ),
    )
    return BootstrapDriver(
        projects=projects,
        resolver=resolver,
        prompter=build_prompter(state),
        cloner=StagedCloner(depth=settings.clone_depth),
        echo=echo,
        spinner=with_spinner,
    )


def _session(state: CLIState, **kwargs) -> BootstrapSession:
    return BootstrapSession(
        verbose=state.verbose, interactive=state.interactive, **kwargs
    )


@app_app.command("create")
def create(
    ctx: typer.Context,
    app_name: Optional[str] = typer.Argument(None, metavar="APP_NAME"),
    template: str = typer.Option(
        "",
        "--template",
        help=f"TEMPLATE to instantiate, see {DEFAULT_TEMPLATE_BASE_URL}",
    ),
    template_url: str = typer.Option(
        "",
        "--template-url",
        help="URL to instantiate, must contain a taskfile.yaml",
    ),
    sandbox: str = typer.Option(
        "",
        "--sandbox",
        help="NAME of the sandbox, see your cloud dashboard",
    ),
    server_url: Optional[str] = typer.Option(None, "--server-url", hidden=True),
    install: bool = typer.Option(
        False,
        "--install",
        help="Run installation tasks after creating the app",
        hidden=True,
    ),
) -> None:
    """Bootstrap a new application from a template or through guided creation."""
    state = _state(ctx)
    session = _session(
        state,
        template_name=template,
        template_url=template_url,
        sandbox_id=sandbox,
        app_name=app_name or "",
        install=install,
        server_url=server_url or get_settings().cloud_api_url,
    )

    try:
        app_dir = build_driver(state).create(session)
    except LkError as e:
        if session.state in _AFTER_CLONE:
            echo(f"{session.app_dir.name} was created but setup did not finish.")
            echo("Fix the problem, then run `lk app install` or `lk app run` inside it.")
        handle_cli_error(e, ctx, state.verbose)

    print_success(f"Created {app_dir.name}")
    print_next_steps(app_dir.name)


@app_app.command("install", hidden=True)
def install_app(
    ctx: typer.Context,
    directory: Path = typer.Argument(
        Path("."),
        metavar="[DIR]",
        help="Location of the project directory (default: current directory)",
    ),
) -> None:
    """Execute the installation defined in taskfile.yaml."""
    state = _state(ctx)
    try:
        build_driver(state).install(_session(state), directory)
    except LkError as e:
        handle_cli_error(e, ctx, state.verbose)


@app_app.command("run", hidden=True)
def run_task(
    ctx: typer.Context,
    task: str = typer.Argument("", metavar="[TASK]", help="Task to run in the project's taskfile.yaml"),
) -> None:
    """Execute a task defined in taskfile.yaml."""
    state = _state(ctx)
    try:
        build_driver(state).run(_session(state), Path("."), task)
    except LkError as e:
        handle_cli_error(e, ctx, state.verbose)


@app_app.command("env", hidden=True)
def env(ctx: typer.Context) -> None:
    """Manage environment variables."""
    state = _state(ctx)
    try:
        path = build_driver(state).env(_session(state), Path("."))
    except LkError as e:
        handle_cli_error(e, ctx, state.verbose)
    logger.debug(f"Environment reconciled at {path}")
