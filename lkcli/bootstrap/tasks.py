"""Task runner glue between the bootstrap flow and the task file executor."""

from pathlib import Path
from typing import Callable, Optional, Union

from lkcli.bootstrap.prompts import InputRequest, Option, Prompter
from lkcli.bootstrap.taskfile import Taskfile, TaskUnit, new_task, parse_taskfile
from lkcli.logging import get_logger

logger = get_logger(__name__)

TaskfileParser = Callable[[Path], Taskfile]
TaskFactory = Callable[[Taskfile, Path, str, bool], TaskUnit]


def task_selection(taskfile: Taskfile) -> InputRequest:
    """Input request offering every task in the file."""
    options = []
    for name in taskfile.task_names():
        desc = taskfile.tasks[name].desc
        options.append(Option(label=f"{name} - {desc}" if desc else name, value=name))
    return InputRequest(
        field="task",
        kind="select",
        title="Select Task",
        options=tuple(options),
    )


class TaskRunner:
    """Runs a named, chosen or optional lifecycle task at an application root."""

    def __init__(
        self,
        parse: Optional[TaskfileParser] = None,
        task_factory: Optional[TaskFactory] = None,
    ) -> None:
        self.parse = parse or parse_taskfile
        self.task_factory = task_factory or new_task

    def run(
        self,
        root_path: Union[str, Path],
        task_name: str,
        prompter: Prompter,
        verbose: bool = False,
        optional: bool = False,
    ) -> Optional[str]:
        """
        Run a task.

        Args:
            root_path: Application root holding the task file
            task_name: Task to run; empty to choose one through the prompter
            prompter: Answers the task selection
            verbose: Stream task output
            optional: Succeed without action when the task is not defined

        Returns:
            Name of the task that ran, None when an optional task is absent

        Raises:
            TaskfileError: If the task file is missing or invalid
            TaskNotFoundError: If a required task is not defined
            TaskExecutionError: If the task fails
        """
        root_path = Path(root_path)
        taskfile = self.parse(root_path)

        if not task_name:
            task_name = str(prompter.ask(task_selection(taskfile)))
        elif optional and taskfile.get(task_name) is None:
            logger.debug(f"No {task_name} task in {taskfile.path}, skipping")
            return None

        unit = self.task_factory(taskfile, root_path, task_name, verbose)
        logger.debug(f"Running task {task_name} in {root_path}")
        unit()
        return task_name
