"""
Task file loading and execution.

Templates describe their lifecycle in a task file (``taskfile.yaml`` and
its usual spellings) at the application root. This module understands the
subset templates rely on:

    version: '3'
    env:
      NODE_ENV: development
    tasks:
      install:
        desc: Install dependencies
        dir: frontend
        deps: [tools]
        cmds:
          - npm install
          - task: post-install
      post-install: echo done
      tools:
        - pip install -r requirements.txt

A task is a mapping, a single command string or a list of commands.
Commands are strings, ``{cmd: ...}`` or ``{task: ...}`` mappings.
Variables and templating are not interpreted.
"""

import os
import subprocess
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from rich.console import Console

from lkcli.errors import TaskExecutionError, TaskfileError, TaskNotFoundError
from lkcli.logging import get_logger

logger = get_logger(__name__)
console = Console()

TASKFILE_NAMES = (
    "Taskfile.yml",
    "taskfile.yml",
    "Taskfile.yaml",
    "taskfile.yaml",
    "Taskfile.dist.yml",
    "taskfile.dist.yml",
    "Taskfile.dist.yaml",
    "taskfile.dist.yaml",
)

TASK_INSTALL = "install"
TASK_POST_CREATE = "post-create"

# Runs a resolved task; raises TaskExecutionError on failure
TaskUnit = Callable[[], None]


class TaskCommand(BaseModel):
    """One step of a task: a shell command or a call to another task."""

    model_config = ConfigDict(extra="ignore")

    cmd: Optional[str] = None
    task: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"cmd": data}
        return data

    @model_validator(mode="after")
    def exactly_one(self) -> "TaskCommand":
        if (self.cmd is None) == (self.task is None):
            raise ValueError("a command needs exactly one of 'cmd' or 'task'")
        return self


class TaskDefinition(BaseModel):
    """A named task."""

    model_config = ConfigDict(extra="ignore")

    desc: str = ""
    cmds: list[TaskCommand] = Field(default_factory=list)
    deps: list[str] = Field(default_factory=list)
    dir: Optional[str] = None
    env: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def from_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"cmds": [data]}
        if isinstance(data, list):
            return {"cmds": data}
        return data


class Taskfile(BaseModel):
    """A parsed task file."""

    model_config = ConfigDict(extra="ignore")

    path: Path
    env: dict[str, str] = Field(default_factory=dict)
    tasks: dict[str, TaskDefinition] = Field(default_factory=dict)

    def task_names(self) -> list[str]:
        """Task names in file order."""
        return list(self.tasks)

    def get(self, name: str) -> Optional[TaskDefinition]:
        return self.tasks.get(name)


def find_taskfile(root_path: Path) -> Optional[Path]:
    """Locate the task file under ``root_path``, None if there is none."""
    for name in TASKFILE_NAMES:
        candidate = Path(root_path) / name
        if candidate.is_file():
            return candidate
    return None


def _stringify_env(raw: Any) -> Any:
    if isinstance(raw, dict):
        return {str(k): "" if v is None else str(v) for k, v in raw.items()}
    return raw


def parse_taskfile(root_path: Union[str, Path]) -> Taskfile:
    """
    Parse the task file at ``root_path``.

    Raises:
        TaskfileError: If no task file exists or it cannot be parsed
    """
    root_path = Path(root_path)
    path = find_taskfile(root_path)
    if path is None:
        raise TaskfileError(
            f"no task file found in {root_path}",
            error_code="TASKFILE-NotFound",
            details={"root": str(root_path), "names": list(TASKFILE_NAMES)},
            suggestion="Templates must provide a taskfile.yaml at their root",
        )

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise TaskfileError(
            f"cannot parse {path}: {e}",
            error_code="TASKFILE-Invalid",
            details={"path": str(path)},
        ) from e

    if not isinstance(raw, dict):
        raise TaskfileError(
            f"{path} must be a mapping",
            error_code="TASKFILE-Invalid",
            details={"path": str(path)},
        )

    tasks = raw.get("tasks") or {}
    if isinstance(tasks, dict):
        tasks = {
            str(name): (
                {**task, "env": _stringify_env(task.get("env"))}
                if isinstance(task, dict) and task.get("env") is not None
                else task
            )
            for name, task in tasks.items()
        }

    try:
        taskfile = Taskfile.model_validate(
            {
                "path": path,
                "env": _stringify_env(raw.get("env")) or {},
                "tasks": tasks,
            }
        )
    except ValidationError as e:
        raise TaskfileError(
            f"invalid task file {path}: {e.error_count()} error(s)",
            error_code="TASKFILE-Invalid",
            details={"path": str(path), "errors": e.errors(include_url=False)},
        ) from e

    logger.debug(f"Parsed {path} with tasks: {', '.join(taskfile.task_names())}")
    return taskfile


class TaskExecutor:
    """Runs tasks from a task file through the shell."""

    def __init__(self, taskfile: Taskfile, root_path: Path, verbose: bool = False) -> None:
        self.taskfile = taskfile
        self.root_path = Path(root_path)
        self.verbose = verbose

    def run(self, name: str, _stack: tuple[str, ...] = ()) -> None:
        """
        Run a task, its dependencies first.

        Raises:
            TaskNotFoundError: If the task or one it calls does not exist
            TaskfileError: On a dependency cycle or a missing task directory
            TaskExecutionError: If a command fails
        """
        if name in _stack:
            cycle = " -> ".join((*_stack, name))
            raise TaskfileError(
                f"task dependency cycle: {cycle}",
                error_code="TASKFILE-Cycle",
                details={"path": str(self.taskfile.path), "cycle": cycle},
            )

        task = self.taskfile.get(name)
        if task is None:
            raise TaskNotFoundError(name, self.taskfile.task_names())

        stack = (*_stack, name)
        for dep in task.deps:
            self.run(dep, stack)

        for step in task.cmds:
            if step.task is not None:
                self.run(step.task, stack)
            else:
                self._run_command(name, task, step.cmd or "")

    def _run_command(self, name: str, task: TaskDefinition, command: str) -> None:
        cwd = self.root_path / task.dir if task.dir else self.root_path
        if not cwd.is_dir():
            raise TaskfileError(
                f"task '{name}' directory does not exist: {cwd}",
                error_code="TASKFILE-MissingDir",
                details={"path": str(self.taskfile.path), "task": name, "dir": str(cwd)},
            )
        env = {**os.environ, **self.taskfile.env, **task.env}

        logger.debug(f"[{name}] {command} (cwd={cwd})")
        try:
            if self.verbose:
                console.print(f"[dim]task: \\[{name}] {command}[/dim]")
                result = subprocess.run(command, shell=True, cwd=cwd, env=env, check=False)
                output = ""
            else:
                result = subprocess.run(
                    command,
                    shell=True,
                    cwd=cwd,
                    env=env,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    check=False,
                )
                output = (result.stdout or "").strip()
        except OSError as e:
            raise TaskExecutionError(name, command, -1, str(e)) from e

        if result.returncode != 0:
            raise TaskExecutionError(name, command, result.returncode, output)


def new_task(
    taskfile: Taskfile,
    root_path: Union[str, Path],
    task_name: str,
    verbose: bool = False,
) -> TaskUnit:
    """
    Resolve a task to an executable unit.

    Raises:
        TaskNotFoundError: If the task file does not define ``task_name``
    """
    if taskfile.get(task_name) is None:
        raise TaskNotFoundError(task_name, taskfile.task_names())

    executor = TaskExecutor(taskfile, Path(root_path), verbose)

    def run() -> None:
        executor.run(task_name)

    return run
