"""
Error handling framework for lkcli.

Provides the exception hierarchy shared by the bootstrap core and the CLI.
"""

from lkcli.errors.exceptions import (
    AppDirectoryExistsError,
    CatalogError,
    CloneError,
    CollaboratorError,
    ConfigurationError,
    ConfigurationFileError,
    DotEnvError,
    EmptySandboxError,
    ExternalProcessError,
    InputRequiredError,
    LkError,
    ProjectNotFoundError,
    ResolutionError,
    TaskExecutionError,
    TaskfileError,
    TaskNotFoundError,
    TemplateNotFoundError,
)

__all__ = [
    # Base exception
    "LkError",
    # Configuration
    "ConfigurationError",
    "ConfigurationFileError",
    "InputRequiredError",
    "AppDirectoryExistsError",
    "TaskfileError",
    # Resolution
    "ResolutionError",
    "TemplateNotFoundError",
    "EmptySandboxError",
    "ProjectNotFoundError",
    "TaskNotFoundError",
    # External process
    "ExternalProcessError",
    "CloneError",
    # Collaborators
    "CollaboratorError",
    "CatalogError",
    "DotEnvError",
    "TaskExecutionError",
]
