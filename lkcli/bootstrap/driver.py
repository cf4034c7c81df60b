"""
Bootstrap driver.

Composes project resolution, template resolution, staged cloning,
environment reconciliation and task running into the create-app flow and
the standalone install, run and env flows.

The create flow walks its states in order:

    RESOLVING_PROJECT -> RESOLVING_TEMPLATE -> NAMING_APP -> CLONING
        -> RECONCILING_ENV -> (INSTALLING | POST_CREATING) -> DONE

A failure in any state aborts the remaining ones. Nothing is rolled back:
once cloned, the application directory stays on disk even if a later
step fails.
"""

from contextlib import AbstractContextManager, nullcontext
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from rich.console import Console

from lkcli.bootstrap.cloner import StagedCloner
from lkcli.bootstrap.environment import ENV_SANDBOX_ID, EnvironmentReconciler
from lkcli.bootstrap.projects import choose_app_name
from lkcli.bootstrap.prompts import InputRequest, Prompter
from lkcli.bootstrap.resolver import TemplateResolver, check_template_flags
from lkcli.bootstrap.session import BootstrapSession, BootstrapState
from lkcli.bootstrap.taskfile import TASK_INSTALL, TASK_POST_CREATE
from lkcli.bootstrap.tasks import TaskRunner
from lkcli.config.projects import ProjectConfig
from lkcli.logging import get_logger

logger = get_logger(__name__)
console = Console()

Echo = Callable[[str], None]
Spinner = Callable[[str], AbstractContextManager]


class ProjectSource(Protocol):
    """Resolves the project credentials, possibly through the prompter."""

    def resolve(self, prompter: Prompter) -> ProjectConfig: ...


def _no_spinner(message: str) -> AbstractContextManager:
    return nullcontext()


class BootstrapDriver:
    """Runs the bootstrap flows against injected collaborators.

    Attributes:
        projects: Project credential source
        resolver: Template resolver
        cloner: Staged cloner
        reconciler: Environment reconciler
        tasks: Task runner
        prompter: Satisfies every input request of the flow
        echo: Prints progress lines
        spinner: Wraps long-running steps, given the step title
    """

    def __init__(
        self,
        projects: ProjectSource,
        resolver: TemplateResolver,
        prompter: Prompter,
        cloner: Optional[StagedCloner] = None,
        reconciler: Optional[EnvironmentReconciler] = None,
        tasks: Optional[TaskRunner] = None,
        echo: Optional[Echo] = None,
        spinner: Optional[Spinner] = None,
    ) -> None:
        self.projects = projects
        self.resolver = resolver
        self.prompter = prompter
        self.cloner = cloner or StagedCloner()
        self.reconciler = reconciler or EnvironmentReconciler()
        self.tasks = tasks or TaskRunner()
        self.echo = echo or console.print
        self.spinner = spinner or _no_spinner

    def _enter(self, session: BootstrapSession, state: BootstrapState) -> None:
        session.enter(state)
        logger.debug(f"Bootstrap state -> {state.value}")

    def _step(self, session: BootstrapSession, title: str) -> AbstractContextManager:
        # Verbose runs stream process output, which a spinner would garble
        if session.verbose:
            return nullcontext()
        return self.spinner(title)

    def _require_project(self, session: BootstrapSession) -> ProjectConfig:
        if session.project is None:
            session.project = self.projects.resolve(self.prompter)
        logger.debug(f"Using project {session.project.name}")
        return session.project

    def _name_app(self, session: BootstrapSession) -> str:
        decision: Union[str, InputRequest] = choose_app_name(
            session.app_name, session.base_dir, default=session.sandbox_id
        )
        if isinstance(decision, InputRequest):
            decision = str(self.prompter.ask(decision)).strip()
        session.app_name = decision
        session.app_dir = session.base_dir / decision
        return decision

    def create(self, session: BootstrapSession) -> Path:
        """
        Create an application from a template.

        Args:
            session: Inputs of this invocation; updated as the flow advances

        Returns:
            The application directory

        Raises:
            ConfigurationError: Conflicting flags, invalid name, existing
                directory, missing input or a broken task file
            ResolutionError: Unknown template, empty sandbox, no project
            CloneError: If cloning failed
            CollaboratorError: If the catalog, env file or a task failed
        """
        check_template_flags(session.template_name, session.template_url)

        self._enter(session, BootstrapState.RESOLVING_PROJECT)
        self._require_project(session)

        self._enter(session, BootstrapState.RESOLVING_TEMPLATE)
        template = self.resolver.resolve(session, self.prompter)

        self._enter(session, BootstrapState.NAMING_APP)
        self._name_app(session)
        app_dir = session.app_dir

        self._enter(session, BootstrapState.CLONING)
        self.echo("Cloning template...")
        with self._step(session, f"Cloning template from {template.url}"):
            self.cloner.clone(template.url, app_dir, verbose=session.verbose)

        self._enter(session, BootstrapState.RECONCILING_ENV)
        self.echo("Instantiating environment...")
        extra = {ENV_SANDBOX_ID: session.sandbox_id} if session.is_sandbox else None
        self.reconciler.reconcile(
            app_dir, session.project, self.prompter, extra=extra, verbose=session.verbose
        )

        if session.install:
            self._enter(session, BootstrapState.INSTALLING)
            self.echo("Installing template...")
            with self._step(session, "Installing..."):
                self.tasks.run(app_dir, TASK_INSTALL, self.prompter, session.verbose)
        else:
            self._enter(session, BootstrapState.POST_CREATING)
            with self._step(session, "Cleaning up..."):
                self.tasks.run(
                    app_dir,
                    TASK_POST_CREATE,
                    self.prompter,
                    session.verbose,
                    optional=True,
                )

        self._enter(session, BootstrapState.DONE)
        logger.info(f"Created {session.app_name} from {template.name}")
        return app_dir

    def install(self, session: BootstrapSession, root_path: Path) -> None:
        """Run the install task of an existing application."""
        self._require_project(session)
        with self._step(session, "Installing..."):
            self.tasks.run(root_path, TASK_INSTALL, self.prompter, session.verbose)

    def run(
        self, session: BootstrapSession, root_path: Path, task_name: str = ""
    ) -> Optional[str]:
        """Run a task by name, asking for one when the name is empty."""
        if task_name:
            with self._step(session, f"Running task {task_name}..."):
                return self.tasks.run(root_path, task_name, self.prompter, session.verbose)

        # The task is only known after the selection prompt
        return self.tasks.run(root_path, "", self.prompter, session.verbose)

    def env(self, session: BootstrapSession, root_path: Path) -> Path:
        """Reconcile the environment file of an existing application."""
        project = self._require_project(session)
        return self.reconciler.reconcile(
            root_path, project, self.prompter, verbose=session.verbose
        )
