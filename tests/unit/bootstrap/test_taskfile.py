"""Tests for task file parsing and execution."""

import pytest

from lkcli.bootstrap.taskfile import find_taskfile, new_task, parse_taskfile
from lkcli.errors import (
    TaskExecutionError,
    TaskfileError,
    TaskNotFoundError,
)

TASKFILE = """\
version: '3'
env:
  GREETING: hello
tasks:
  setup:
    desc: Prepare things
    deps: [tools]
    cmds:
      - echo setup >> log.txt
      - task: finish
  tools: echo tools >> log.txt
  finish:
    - cmd: echo finish >> log.txt
  greet:
    env:
      NAME: world
    cmds:
      - echo "$GREETING $NAME" > greeting.txt
  in-sub:
    dir: sub
    cmds:
      - pwd > where.txt
  fail:
    cmds:
      - echo boom
      - exit 3
"""


@pytest.fixture
def root(tmp_path):
    (tmp_path / "taskfile.yaml").write_text(TASKFILE)
    (tmp_path / "sub").mkdir()
    return tmp_path


class TestParseTaskfile:
    """Tests for locating and parsing the task file."""

    def test_task_names_in_file_order(self, root):
        taskfile = parse_taskfile(root)

        assert taskfile.task_names() == ["setup", "tools", "finish", "greet", "in-sub", "fail"]
        assert taskfile.env == {"GREETING": "hello"}
        assert taskfile.tasks["setup"].desc == "Prepare things"

    def test_shorthand_tasks(self, root):
        taskfile = parse_taskfile(root)

        assert taskfile.tasks["tools"].cmds[0].cmd == "echo tools >> log.txt"
        assert taskfile.tasks["finish"].cmds[0].cmd == "echo finish >> log.txt"
        assert taskfile.tasks["setup"].cmds[1].task == "finish"

    @pytest.mark.parametrize("name", ["Taskfile.yml", "taskfile.dist.yaml"])
    def test_alternative_names(self, tmp_path, name):
        (tmp_path / name).write_text("tasks:\n  a: echo a\n")
        assert find_taskfile(tmp_path) == tmp_path / name
        assert parse_taskfile(tmp_path).task_names() == ["a"]

    def test_missing_taskfile(self, tmp_path):
        with pytest.raises(TaskfileError) as exc_info:
            parse_taskfile(tmp_path)
        assert exc_info.value.error_code == "TASKFILE-NotFound"

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "taskfile.yaml").write_text("tasks: [unclosed\n")
        with pytest.raises(TaskfileError):
            parse_taskfile(tmp_path)

    def test_invalid_command(self, tmp_path):
        (tmp_path / "taskfile.yaml").write_text("tasks:\n  a:\n    cmds:\n      - {}\n")
        with pytest.raises(TaskfileError):
            parse_taskfile(tmp_path)

    def test_numeric_env_values(self, tmp_path):
        (tmp_path / "taskfile.yaml").write_text("env:\n  PORT: 3000\ntasks:\n  a: echo a\n")
        assert parse_taskfile(tmp_path).env == {"PORT": "3000"}


class TestNewTask:
    """Tests for resolving and running tasks."""

    def test_deps_then_commands_then_called_tasks(self, root):
        new_task(parse_taskfile(root), root, "setup")()

        assert (root / "log.txt").read_text().split() == ["tools", "setup", "finish"]

    def test_environment_layers(self, root):
        new_task(parse_taskfile(root), root, "greet")()
        assert (root / "greeting.txt").read_text().strip() == "hello world"

    def test_task_dir(self, root):
        new_task(parse_taskfile(root), root, "in-sub")()
        assert (root / "sub" / "where.txt").exists()

    def test_unknown_task(self, root):
        with pytest.raises(TaskNotFoundError) as exc_info:
            new_task(parse_taskfile(root), root, "deploy")
        assert "setup" in exc_info.value.details["available"]

    def test_failure_reports_command_and_output(self, root):
        task = new_task(parse_taskfile(root), root, "fail")

        with pytest.raises(TaskExecutionError) as exc_info:
            task()

        assert exc_info.value.returncode == 3
        assert exc_info.value.command == "exit 3"
        assert exc_info.value.output == "boom"

    def test_verbose_streams_output(self, root, capfd):
        with pytest.raises(TaskExecutionError) as exc_info:
            new_task(parse_taskfile(root), root, "fail", verbose=True)()

        assert exc_info.value.output == ""
        assert "boom" in capfd.readouterr().out

    def test_dependency_cycle(self, tmp_path):
        (tmp_path / "taskfile.yaml").write_text(
            "tasks:\n  a:\n    deps: [b]\n  b:\n    deps: [a]\n"
        )
        with pytest.raises(TaskfileError) as exc_info:
            new_task(parse_taskfile(tmp_path), tmp_path, "a")()
        assert exc_info.value.details["cycle"] == "a -> b -> a"

    def test_call_to_missing_task(self, tmp_path):
        (tmp_path / "taskfile.yaml").write_text("tasks:\n  a:\n    cmds:\n      - task: ghost\n")
        with pytest.raises(TaskNotFoundError):
            new_task(parse_taskfile(tmp_path), tmp_path, "a")()

    def test_missing_task_dir(self, tmp_path):
        (tmp_path / "taskfile.yaml").write_text(
            "tasks:\n  build:\n    dir: frontend\n    cmds: [echo hi]\n"
        )
        with pytest.raises(TaskfileError) as exc_info:
            new_task(parse_taskfile(tmp_path), tmp_path, "build")()

        assert exc_info.value.error_code == "TASKFILE-MissingDir"
        assert exc_info.value.details["dir"] == str(tmp_path / "frontend")

    def test_process_start_failure(self, root, monkeypatch):
        def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("lkcli.bootstrap.taskfile.subprocess.run", refuse)

        with pytest.raises(TaskExecutionError) as exc_info:
            new_task(parse_taskfile(root), root, "fail")()

        assert exc_info.value.returncode == -1
        assert "Permission denied" in exc_info.value.output
