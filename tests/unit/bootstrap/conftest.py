"""Shared fixtures for bootstrap tests."""

import subprocess
from pathlib import Path

import pytest

from lkcli.bootstrap.templates import SandboxDetails, Template
from lkcli.config.projects import ProjectConfig

TASKFILE_OK = """\
version: '3'
tasks:
  install:
    cmds:
      - echo installed > installed.txt
  post-create:
    cmds:
      - echo cleaned > cleaned.txt
"""


@pytest.fixture
def project():
    """Project credentials used as the active project."""
    return ProjectConfig(
        name="dev",
        url="wss://dev.example.test",
        api_key="APIdevkey",
        api_secret="dev-secret-value",
    )


class FakeCatalog:
    """In-memory template catalog recording every call."""

    def __init__(self, templates=None, sandbox_children=None):
        self.templates = list(templates or [])
        self.sandbox_children = list(sandbox_children or [])
        self.calls = []

    def fetch_templates(self):
        self.calls.append(("fetch_templates",))
        return list(self.templates)

    def fetch_sandbox_details(self, sandbox_id, token, server_url):
        self.calls.append(("fetch_sandbox_details", sandbox_id, token, server_url))
        return SandboxDetails(name=sandbox_id, child_templates=self.sandbox_children)


@pytest.fixture
def catalog():
    return FakeCatalog(
        templates=[
            Template(name="foo", url="https://example.test/foo.git"),
            Template(name="bar", url="https://example.test/bar.git"),
        ]
    )


class FakeGit:
    """Stand-in for subprocess.run that fakes `git clone` into the target path.

    Attributes:
        files: Files written into every clone (relative path -> content)
        returncode: Exit status reported for the clone
        commands: Commands received, in order
    """

    def __init__(self, files=None, returncode=0, output="Cloning into 'x'...\n"):
        self.files = dict(files if files is not None else {"taskfile.yaml": TASKFILE_OK})
        self.returncode = returncode
        self.output = output
        self.commands = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(list(cmd))
        target = Path(cmd[-1])
        target.mkdir(parents=True)
        (target / ".git").mkdir()
        (target / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
        if self.returncode == 0:
            for name, content in self.files.items():
                path = target / name
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content)
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.output)


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def make_catalog():
    """Factory for catalogs with custom templates or sandbox children."""
    return FakeCatalog


@pytest.fixture
def make_git():
    """Factory for fake git runners."""
    return FakeGit
