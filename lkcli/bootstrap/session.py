"""
Bootstrap session state.

A BootstrapSession carries everything one invocation of the bootstrap
flow knows: the user's inputs, the resolved project and template, the
application directory and the states visited so far. It is created per
invocation and passed explicitly through the resolver, cloner,
environment reconciler and task runner.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from lkcli.bootstrap.templates import Template
from lkcli.config.projects import ProjectConfig


class BootstrapState(str, Enum):
    """States of the create-app flow, in order."""

    RESOLVING_PROJECT = "resolving_project"
    RESOLVING_TEMPLATE = "resolving_template"
    NAMING_APP = "naming_app"
    CLONING = "cloning"
    RECONCILING_ENV = "reconciling_env"
    INSTALLING = "installing"
    POST_CREATING = "post_creating"
    DONE = "done"


@dataclass
class BootstrapSession:
    """State for a single bootstrap invocation.

    Attributes:
        template_name: Template name chosen on the command line
        template_url: Template URL chosen on the command line
        sandbox_id: Sandbox identifier, empty when not bootstrapping a sandbox
        app_name: Application name from the command line
        install: Run the install task instead of post-create
        verbose: Show process output
        interactive: Whether missing input may be asked for
        server_url: Cloud API server used for sandbox resolution
        base_dir: Directory the application directory is created in
        project: Resolved project credentials
        template: Resolved template
        app_dir: Final application directory
        states: States visited, in order
    """

    template_name: str = ""
    template_url: str = ""
    sandbox_id: str = ""
    app_name: str = ""
    install: bool = False
    verbose: bool = False
    interactive: bool = True
    server_url: str = ""
    base_dir: Path = field(default_factory=Path.cwd)
    project: Optional[ProjectConfig] = None
    template: Optional[Template] = None
    app_dir: Optional[Path] = None
    states: list[BootstrapState] = field(default_factory=list)

    @property
    def is_sandbox(self) -> bool:
        return bool(self.sandbox_id)

    @property
    def state(self) -> Optional[BootstrapState]:
        """The current state, None before the flow starts."""
        return self.states[-1] if self.states else None

    def enter(self, state: BootstrapState) -> None:
        self.states.append(state)
