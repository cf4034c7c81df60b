"""
Exception hierarchy for lkcli.

Errors fall into four families, each terminal to the current invocation
and never retried automatically:

- ConfigurationError: conflicting or missing flags/arguments, invalid
  configuration files or task files.
- ResolutionError: a named thing (template, sandbox, project, task) could
  not be resolved. The failing value is kept in ``details``.
- ExternalProcessError: an external process (git) failed; captured output
  is attached.
- CollaboratorError: a delegated collaborator (catalog, dotenv, task
  executor) failed. These are propagated as raised, never wrapped.
"""

from typing import Any, Optional


class LkError(Exception):
    """
    Base exception class for all lkcli errors.

    Attributes:
        message: Human-readable error message
        error_code: Optional error code for reference and documentation
        details: Optional dictionary with additional error details
        suggestion: Optional suggestion text for how to fix the error
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.suggestion = suggestion
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize error to dictionary for JSON output.

        Returns:
            Dictionary with all error information
        """
        result: dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.error_code:
            result["error_code"] = self.error_code
        if self.details:
            result["details"] = self.details
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result


# --- Configuration Errors ---


class ConfigurationError(LkError):
    """
    Conflicting, missing or invalid configuration.

    Use for flag/argument problems and broken configuration files. The fix
    is on the caller side (change the invocation or edit a file).

    Attributes:
        show_help: Whether the CLI should print the subcommand help along
            with the error.

    Examples:
        >>> raise ConfigurationError(
        ...     message="only one of template or template-url can be specified",
        ...     error_code="CONFIG-ConflictingFlags",
        ...     details={"template": "foo", "template_url": "http://x"},
        ...     show_help=True,
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        suggestion: Optional[str] = None,
        show_help: bool = False,
    ) -> None:
        super().__init__(message, error_code, details, suggestion)
        self.show_help = show_help


class InputRequiredError(ConfigurationError):
    """Input was required but the invocation is non-interactive."""

    def __init__(
        self,
        field: str,
        title: str = "",
        options: Optional[list[str]] = None,
    ) -> None:
        message = f"missing required input: {field}"
        if title:
            message = f"{message} ({title})"
        super().__init__(
            message,
            error_code="CONFIG-InputRequired",
            details={"field": field, "options": list(options or [])},
            suggestion="Pass the value on the command line or run interactively",
            show_help=True,
        )
        self.field = field


class ConfigurationFileError(ConfigurationError):
    """The CLI configuration file cannot be read or written."""

    pass


class AppDirectoryExistsError(ConfigurationError):
    """The application directory already exists."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"application directory already exists: {path}",
            error_code="CONFIG-AppDirectoryExists",
            details={"path": path},
            suggestion="Choose a different application name or remove the directory",
        )


class TaskfileError(ConfigurationError):
    """No recognized task file exists at a root, or it cannot be parsed."""

    pass


# --- Resolution Errors ---


class ResolutionError(LkError):
    """A named template, sandbox, project or task could not be resolved."""

    pass


class TemplateNotFoundError(ResolutionError):
    """The requested template name is not in the available set."""

    def __init__(self, template_name: str) -> None:
        super().__init__(
            f"template not found: {template_name}",
            error_code="RESOLVE-TemplateNotFound",
            details={"template": template_name},
        )


class EmptySandboxError(ResolutionError):
    """A sandbox resolved to zero child templates."""

    def __init__(self, sandbox_id: str) -> None:
        super().__init__(
            f"no child templates found for sandbox: {sandbox_id}",
            error_code="RESOLVE-EmptySandbox",
            details={"sandbox_id": sandbox_id},
        )


class ProjectNotFoundError(ResolutionError):
    """No project credentials are available."""

    pass


class TaskNotFoundError(ResolutionError):
    """The task file does not provide the requested task."""

    def __init__(self, task_name: str, available: Optional[list[str]] = None) -> None:
        super().__init__(
            f"task not found: {task_name}",
            error_code="RESOLVE-TaskNotFound",
            details={"task": task_name, "available": list(available or [])},
        )


# --- External Process Errors ---


class ExternalProcessError(LkError):
    """
    An external process exited unsuccessfully.

    Attributes:
        returncode: Process exit code, None if it could not be started
        output: Captured combined stdout/stderr
    """

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        output: str = "",
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message, error_code, details, suggestion)
        self.returncode = returncode
        self.output = output


class CloneError(ExternalProcessError):
    """git clone failed."""

    pass


# --- Delegated Collaborator Errors ---


class CollaboratorError(LkError):
    """A delegated collaborator reported a failure."""

    pass


class CatalogError(CollaboratorError):
    """The template catalog or sandbox service could not be queried."""

    pass


class DotEnvError(CollaboratorError):
    """The environment file could not be instantiated."""

    pass


class TaskExecutionError(CollaboratorError):
    """
    A task command exited unsuccessfully.

    Attributes:
        task: Name of the task being run
        command: The failing command line
        returncode: Exit code of the failing command
        output: Captured output, empty when output was streamed
    """

    def __init__(
        self,
        task: str,
        command: str,
        returncode: int,
        output: str = "",
    ) -> None:
        super().__init__(
            f"task '{task}' failed: `{command}` exited with status {returncode}",
            error_code="TASK-ExecutionFailed",
            details={"task": task, "command": command, "returncode": returncode},
        )
        self.task = task
        self.command = command
        self.returncode = returncode
        self.output = output
