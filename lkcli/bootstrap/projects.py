"""
Project and application-name decisions for the bootstrap flow.

Project resolution runs at most two attempts: the first against the
configured credentials, the second after an interactive authentication
detour has stored a new project.
"""

import re
from pathlib import Path
from typing import Callable, Optional, Union

from lkcli.bootstrap.prompts import InputRequest, Option, Prompter
from lkcli.config.projects import (
    CLIConfig,
    ProjectConfig,
    load_cli_config,
    load_project_details,
    save_cli_config,
)
from lkcli.errors import ConfigurationError, ProjectNotFoundError
from lkcli.logging import get_logger

logger = get_logger(__name__)

APP_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_-]*$")
MIN_PROMPTED_NAME_LENGTH = 3

# Returns the project for this invocation; raises ProjectNotFoundError
ProjectProvider = Callable[[], ProjectConfig]
# Runs the authentication detour; returns the stored project
Authenticator = Callable[[Prompter], ProjectConfig]


def _not_blank(value: str) -> Optional[str]:
    return None if value.strip() else "value is required"


def add_project_interactively(
    prompter: Prompter,
    config_path: Path,
    config: Optional[CLIConfig] = None,
) -> ProjectConfig:
    """
    Ask for project credentials and store them as the default project.

    Args:
        prompter: Collects name, URL, API key and API secret
        config_path: CLI config file to update
        config: Already loaded config; read from config_path when omitted

    Returns:
        The stored project
    """
    if config is None:
        config = load_cli_config(config_path)

    def ask(field: str, title: str, default: Optional[str] = None) -> str:
        return str(
            prompter.ask(
                InputRequest(
                    field=field,
                    kind="text",
                    title=title,
                    default=default,
                    validate=_not_blank,
                )
            )
        ).strip()

    project = ProjectConfig(
        name=ask("project_name", "Project Name", "default"),
        url=ask("project_url", "URL"),
        api_key=ask("project_api_key", "API Key"),
        api_secret=ask("project_api_secret", "API Secret"),
    )
    config.add_project(project, make_default=True)
    save_cli_config(config, config_path)
    logger.info(f"Saved project {project.name} as default")
    return project


def project_selection(config: CLIConfig) -> InputRequest:
    return InputRequest(
        field="project",
        kind="select",
        title="Select a project to use for this app",
        options=tuple(Option(label=p.label, value=p.name) for p in config.projects),
        default=config.default_project,
    )


def authentication_offer() -> InputRequest:
    return InputRequest(
        field="authenticate",
        kind="confirm",
        title="No local projects found. Authenticate one now?",
        default=False,
    )


class ProjectResolver:
    """Resolves the project for a bootstrap invocation.

    Attributes:
        config_path: CLI config file holding the local projects
        project: Project named on the command line
        url: Explicit service URL
        api_key: Explicit API key
        api_secret: Explicit API secret
        authenticate: Authentication detour, defaults to add_project_interactively
    """

    def __init__(
        self,
        config_path: Path,
        project: Optional[str] = None,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        authenticate: Optional[Authenticator] = None,
    ) -> None:
        self.config_path = Path(config_path)
        self.project = project
        self.url = url
        self.api_key = api_key
        self.api_secret = api_secret
        self.authenticate = authenticate or (
            lambda prompter: add_project_interactively(prompter, self.config_path)
        )

    def load(self) -> ProjectConfig:
        """Resolve credentials without asking anything."""
        config = load_cli_config(self.config_path)
        return load_project_details(
            config,
            project=self.project,
            url=self.url,
            api_key=self.api_key,
            api_secret=self.api_secret,
        )

    def _attempt(self, prompter: Prompter) -> Optional[ProjectConfig]:
        """
        One resolution attempt.

        Returns None when no project is configured and the user accepted
        the authentication detour, so the caller should try again.
        """
        try:
            return self.load()
        except ProjectNotFoundError:
            if self.project:
                raise

        config = load_cli_config(self.config_path)
        if config.projects:
            name = prompter.ask(project_selection(config))
            found = config.get_project(str(name))
            if found is None:
                raise ProjectNotFoundError(
                    f"project not found: {name}",
                    error_code="RESOLVE-ProjectNotFound",
                    details={"project": name},
                )
            return found

        if not prompter.ask(authentication_offer()):
            raise ProjectNotFoundError(
                "no project selected",
                error_code="RESOLVE-NoProject",
                suggestion="Pass --url, --api-key and --api-secret or add a project",
            )
        self.authenticate(prompter)
        return None

    def resolve(self, prompter: Prompter) -> ProjectConfig:
        """
        Resolve the project, detouring through authentication at most once.

        Raises:
            ProjectNotFoundError: If no project can be resolved
        """
        for attempt in ("first", "post-auth"):
            logger.debug(f"Resolving project ({attempt} attempt)")
            project = self._attempt(prompter)
            if project is not None:
                return project

        raise ProjectNotFoundError(
            "no project credentials configured",
            error_code="RESOLVE-NoProject",
            details={"config_path": str(self.config_path)},
        )


def validate_app_name(name: str) -> Optional[str]:
    """Return an error message for an invalid application name, else None."""
    if not APP_NAME_PATTERN.match(name):
        return "try a simpler name"
    return None


def check_app_name(name: str) -> None:
    """
    Reject an application name that does not match APP_NAME_PATTERN.

    Raises:
        ConfigurationError: If the name is invalid
    """
    error = validate_app_name(name)
    if error:
        raise ConfigurationError(
            f"invalid application name '{name}': {error}",
            error_code="CONFIG-InvalidAppName",
            details={"app_name": name, "pattern": APP_NAME_PATTERN.pattern},
            suggestion="Start with a letter or underscore, then use letters, digits, '_' or '-'",
        )


def prompted_name_validator(base_dir: Path) -> Callable[[str], Optional[str]]:
    def validate(name: str) -> Optional[str]:
        if len(name) < MIN_PROMPTED_NAME_LENGTH:
            return "name is too short"
        error = validate_app_name(name)
        if error:
            return error
        if (base_dir / name).exists():
            return "that name is in use"
        return None

    return validate


def choose_app_name(
    app_name: str, base_dir: Path, default: str = ""
) -> Union[str, InputRequest]:
    """
    Decide the application name.

    Args:
        app_name: Name given on the command line
        base_dir: Directory the application is created in
        default: Suggested name (the sandbox id when bootstrapping a sandbox)

    Returns:
        The validated name, or an InputRequest when it must be asked for

    Raises:
        ConfigurationError: If an explicit name is invalid
    """
    if app_name:
        check_app_name(app_name)
        return app_name

    return InputRequest(
        field="app_name",
        kind="text",
        title="Application Name",
        description="my-app",
        default=default or None,
        validate=prompted_name_validator(base_dir),
    )
