"""
Application bootstrap core.

Template resolution, staged cloning, environment reconciliation and task
running, composed by the BootstrapDriver.
"""

from lkcli.bootstrap.cloner import StagedCloner, staging_directory, strip_vcs_metadata
from lkcli.bootstrap.driver import BootstrapDriver
from lkcli.bootstrap.envfile import instantiate_dotenv
from lkcli.bootstrap.environment import EnvironmentReconciler, build_env
from lkcli.bootstrap.projects import (
    ProjectResolver,
    add_project_interactively,
    choose_app_name,
)
from lkcli.bootstrap.prompts import CannedPrompter, InputRequest, Option, Prompter
from lkcli.bootstrap.resolver import TemplateResolver, choose_template
from lkcli.bootstrap.session import BootstrapSession, BootstrapState
from lkcli.bootstrap.taskfile import (
    TASK_INSTALL,
    TASK_POST_CREATE,
    Taskfile,
    new_task,
    parse_taskfile,
)
from lkcli.bootstrap.tasks import TaskRunner
from lkcli.bootstrap.templates import SandboxDetails, Template, TemplateCatalog
from lkcli.bootstrap.token import create_access_token

__all__ = [
    # Session
    "BootstrapSession",
    "BootstrapState",
    "BootstrapDriver",
    # Input
    "InputRequest",
    "Option",
    "Prompter",
    "CannedPrompter",
    # Templates
    "Template",
    "SandboxDetails",
    "TemplateCatalog",
    "TemplateResolver",
    "choose_template",
    "create_access_token",
    # Projects
    "ProjectResolver",
    "add_project_interactively",
    "choose_app_name",
    # Cloning
    "StagedCloner",
    "staging_directory",
    "strip_vcs_metadata",
    # Environment
    "EnvironmentReconciler",
    "build_env",
    "instantiate_dotenv",
    # Tasks
    "TaskRunner",
    "Taskfile",
    "parse_taskfile",
    "new_task",
    "TASK_INSTALL",
    "TASK_POST_CREATE",
]
