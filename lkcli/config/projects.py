"""
Project credentials for lkcli.

This module loads and persists the CLI configuration file that holds the
locally known projects, and resolves the active project (URL, API key and
API secret) for an invocation.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from lkcli.errors import ConfigurationError, ConfigurationFileError, ProjectNotFoundError
from lkcli.logging import get_logger

logger = get_logger(__name__)


class ProjectConfig(BaseModel):
    """Credentials for a single project."""

    name: str = Field(..., description="Display name of the project")
    url: str = Field(..., description="Service URL (e.g., wss://my-app.livekit.cloud)")
    api_key: str = Field(..., description="API key")
    api_secret: str = Field(..., description="API secret")

    @field_validator("name", "url", "api_key", "api_secret")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Validate that credential fields are not blank."""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @property
    def label(self) -> str:
        """Label used when offering the project for selection."""
        return f"{self.name} [{self.api_key}]"


class CLIConfig(BaseModel):
    """Contents of the CLI configuration file."""

    default_project: Optional[str] = None
    projects: list[ProjectConfig] = Field(default_factory=list)

    def get_project(self, name: str) -> Optional[ProjectConfig]:
        """Find a project by name."""
        for project in self.projects:
            if project.name == name:
                return project
        return None

    def add_project(self, project: ProjectConfig, make_default: bool = True) -> None:
        """Add or replace a project by name.

        Args:
            project: The project to store
            make_default: Whether the project becomes the default project
        """
        self.projects = [p for p in self.projects if p.name != project.name]
        self.projects.append(project)
        if make_default:
            self.default_project = project.name


def load_cli_config(path: Path) -> CLIConfig:
    """
    Load the CLI configuration file.

    A missing file yields an empty configuration.

    Args:
        path: Location of the YAML configuration file

    Returns:
        The parsed configuration

    Raises:
        ConfigurationFileError: If the file exists but cannot be read or parsed
    """
    if not path.exists():
        logger.debug(f"No CLI config at {path}")
        return CLIConfig()

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationFileError(
            f"cannot read CLI config {path}: {e}",
            error_code="CONFIG-UnreadableFile",
            details={"path": str(path)},
        ) from e

    if not isinstance(raw, dict):
        raise ConfigurationFileError(
            f"CLI config {path} must be a mapping",
            error_code="CONFIG-InvalidFile",
            details={"path": str(path)},
        )

    try:
        return CLIConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationFileError(
            f"invalid CLI config {path}: {e.error_count()} error(s)",
            error_code="CONFIG-InvalidFile",
            details={"path": str(path), "errors": e.errors(include_url=False)},
        ) from e


def save_cli_config(config: CLIConfig, path: Path) -> None:
    """
    Write the CLI configuration file, creating its directory if needed.

    The file holds API secrets, so it is written with owner-only permissions.

    Raises:
        ConfigurationFileError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.model_dump(), f, sort_keys=False)
        path.chmod(0o600)
    except OSError as e:
        raise ConfigurationFileError(
            f"cannot write CLI config {path}: {e}",
            error_code="CONFIG-UnwritableFile",
            details={"path": str(path)},
        ) from e
    logger.debug(f"Saved CLI config with {len(config.projects)} project(s) to {path}")


def load_project_details(
    config: CLIConfig,
    project: Optional[str] = None,
    url: Optional[str] = None,
    api_key: Optional[str] = None,
    api_secret: Optional[str] = None,
) -> ProjectConfig:
    """
    Resolve the project credentials for this invocation.

    Priority order (highest to lowest):
    1. Explicit url/api_key/api_secret (flags or LIVEKIT_* env vars)
    2. A project named explicitly
    3. The configured default project

    Args:
        config: Loaded CLI configuration
        project: Name of a configured project
        url: Explicit service URL
        api_key: Explicit API key
        api_secret: Explicit API secret

    Returns:
        The resolved project

    Raises:
        ConfigurationError: If an explicit credential is blank
        ProjectNotFoundError: If no credentials can be resolved
    """
    explicit = {"url": url, "api_key": api_key, "api_secret": api_secret}
    blank = [field for field, value in explicit.items() if value and not value.strip()]
    if blank:
        raise ConfigurationError(
            f"blank credential: {', '.join(blank)}",
            error_code="CONFIG-BlankCredential",
            details={"fields": blank},
            suggestion="Pass a non-empty value or unset the LIVEKIT_* variable",
        )

    if url and api_key and api_secret:
        logger.debug("Using explicit project credentials")
        return ProjectConfig(
            name="(explicit)", url=url, api_key=api_key, api_secret=api_secret
        )

    if project:
        found = config.get_project(project)
        if found is None:
            raise ProjectNotFoundError(
                f"project not found: {project}",
                error_code="RESOLVE-ProjectNotFound",
                details={"project": project},
                suggestion=f"Known projects: {', '.join(p.name for p in config.projects) or 'none'}",
            )
        return found

    if config.default_project:
        found = config.get_project(config.default_project)
        if found is not None:
            logger.debug(f"Using default project {found.name}")
            return found

    raise ProjectNotFoundError(
        "no project credentials configured",
        error_code="RESOLVE-NoProject",
        details={"default_project": config.default_project},
    )
