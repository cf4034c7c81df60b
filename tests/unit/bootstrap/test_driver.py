"""End-to-end tests for the bootstrap driver with fake git and catalog."""

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from lkcli.bootstrap.cloner import StagedCloner
from lkcli.bootstrap.driver import BootstrapDriver
from lkcli.bootstrap.envfile import read_env_file
from lkcli.bootstrap.prompts import CannedPrompter
from lkcli.bootstrap.resolver import TemplateResolver
from lkcli.bootstrap.session import BootstrapSession, BootstrapState
from lkcli.bootstrap.templates import Template
from lkcli.errors import (
    AppDirectoryExistsError,
    ConfigurationError,
    EmptySandboxError,
    TaskExecutionError,
)


class StaticProjects:
    """Project source returning a fixed project."""

    def __init__(self, project):
        self.project = project
        self.calls = 0

    def resolve(self, prompter):
        self.calls += 1
        return self.project


@pytest.fixture
def lines():
    return []


@pytest.fixture
def make_driver(project, catalog, fake_git, lines):
    def build(answers=None, catalog_=None, git=None):
        return BootstrapDriver(
            projects=StaticProjects(project),
            resolver=TemplateResolver(catalog_ or catalog),
            prompter=CannedPrompter(answers),
            cloner=StagedCloner(runner=git or fake_git),
            echo=lines.append,
        )

    return build


def _entries(path):
    return sorted(p.name for p in path.iterdir())


class TestCreate:
    """Tests for the create-app flow."""

    def test_named_template(self, tmp_path, make_driver, lines):
        """create myapp --template foo"""
        session = BootstrapSession(template_name="foo", app_name="myapp", base_dir=tmp_path)

        app_dir = make_driver().create(session)

        assert app_dir == tmp_path / "myapp"
        assert not (app_dir / ".git").exists()
        env = read_env_file(app_dir / ".env.local")
        assert env == {
            "LIVEKIT_URL": "wss://dev.example.test",
            "LIVEKIT_API_KEY": "APIdevkey",
            "LIVEKIT_API_SECRET": "dev-secret-value",
        }
        assert (app_dir / "cleaned.txt").exists()
        assert not (app_dir / "installed.txt").exists()
        assert lines == ["Cloning template...", "Instantiating environment..."]
        assert _entries(tmp_path) == ["myapp"]

    def test_states_in_order(self, tmp_path, make_driver):
        session = BootstrapSession(template_name="foo", app_name="myapp", base_dir=tmp_path)

        make_driver().create(session)

        assert session.states == [
            BootstrapState.RESOLVING_PROJECT,
            BootstrapState.RESOLVING_TEMPLATE,
            BootstrapState.NAMING_APP,
            BootstrapState.CLONING,
            BootstrapState.RECONCILING_ENV,
            BootstrapState.POST_CREATING,
            BootstrapState.DONE,
        ]
        assert session.template.name == "foo"

    def test_conflicting_flags_touch_nothing(self, tmp_path, make_driver, catalog, fake_git):
        """create myapp --template foo --template-url http://x"""
        session = BootstrapSession(
            template_name="foo", template_url="http://x", app_name="myapp", base_dir=tmp_path
        )

        with pytest.raises(ConfigurationError):
            make_driver().create(session)

        assert list(tmp_path.iterdir()) == []
        assert catalog.calls == []
        assert fake_git.commands == []
        assert session.states == []

    def test_empty_sandbox_never_clones(self, tmp_path, make_driver, make_catalog, fake_git):
        """create --sandbox abc123 with no child templates"""
        session = BootstrapSession(sandbox_id="abc123", base_dir=tmp_path, server_url="https://cloud")

        with pytest.raises(EmptySandboxError):
            make_driver(catalog_=make_catalog(sandbox_children=[])).create(session)

        assert fake_git.commands == []
        assert list(tmp_path.iterdir()) == []
        assert session.state == BootstrapState.RESOLVING_TEMPLATE

    def test_failed_post_create_keeps_app(self, tmp_path, make_driver, make_git):
        """Clone succeeds, post-create fails: the app stays on disk."""
        git = make_git(files={"taskfile.yaml": "tasks:\n  post-create: exit 7\n"})
        session = BootstrapSession(template_name="foo", app_name="myapp", base_dir=tmp_path)

        with pytest.raises(TaskExecutionError) as exc_info:
            make_driver(git=git).create(session)

        assert exc_info.value.returncode == 7
        assert (tmp_path / "myapp" / ".env.local").exists()
        assert session.state == BootstrapState.POST_CREATING

    def test_missing_post_create_is_fine(self, tmp_path, make_driver, make_git):
        git = make_git(files={"taskfile.yaml": "tasks:\n  dev: echo dev\n"})
        session = BootstrapSession(template_name="foo", app_name="myapp", base_dir=tmp_path)

        make_driver(git=git).create(session)

        assert session.state == BootstrapState.DONE

    def test_install_instead_of_post_create(self, tmp_path, make_driver, lines):
        session = BootstrapSession(
            template_name="foo", app_name="myapp", base_dir=tmp_path, install=True
        )

        app_dir = make_driver().create(session)

        assert (app_dir / "installed.txt").exists()
        assert not (app_dir / "cleaned.txt").exists()
        assert lines[-1] == "Installing template..."
        assert BootstrapState.INSTALLING in session.states

    def test_sandbox_adds_sandbox_id(self, tmp_path, make_driver, make_catalog):
        child = Template(name="sandbox-app", url="https://example.test/sandbox-app.git")
        session = BootstrapSession(sandbox_id="abc123", base_dir=tmp_path, server_url="https://cloud")

        app_dir = make_driver(catalog_=make_catalog(sandbox_children=[child]), answers={
            "template_url": child.url,
        }).create(session)

        # The sandbox id doubles as the default application name
        assert app_dir == tmp_path / "abc123"
        assert read_env_file(app_dir / ".env.local")["LIVEKIT_SANDBOX_ID"] == "abc123"

    def test_no_sandbox_id_without_sandbox(self, tmp_path, make_driver):
        session = BootstrapSession(template_name="foo", app_name="myapp", base_dir=tmp_path)
        app_dir = make_driver().create(session)
        assert "LIVEKIT_SANDBOX_ID" not in read_env_file(app_dir / ".env.local")

    def test_prompted_app_name(self, tmp_path, make_driver):
        session = BootstrapSession(template_name="foo", base_dir=tmp_path)

        app_dir = make_driver(answers={"app_name": "prompted"}).create(session)

        assert app_dir == tmp_path / "prompted"
        assert session.app_name == "prompted"

    def test_existing_directory(self, tmp_path, make_driver, fake_git):
        (tmp_path / "myapp").mkdir()
        session = BootstrapSession(template_name="foo", app_name="myapp", base_dir=tmp_path)

        with pytest.raises(AppDirectoryExistsError):
            make_driver().create(session)

        assert list((tmp_path / "myapp").iterdir()) == []
        assert fake_git.commands == []

    def test_preset_project_is_reused(self, tmp_path, project, catalog, fake_git):
        projects = StaticProjects(project)
        driver = BootstrapDriver(
            projects=projects,
            resolver=TemplateResolver(catalog),
            prompter=CannedPrompter(),
            cloner=StagedCloner(runner=fake_git),
            echo=lambda line: None,
        )
        session = BootstrapSession(
            template_name="foo", app_name="myapp", base_dir=tmp_path, project=project
        )

        driver.create(session)

        assert projects.calls == 0

    def test_spinner_wraps_steps_unless_verbose(self, tmp_path, project, catalog, fake_git):
        titles = []

        @contextmanager
        def spinner(title):
            titles.append(title)
            yield

        def build():
            return BootstrapDriver(
                projects=StaticProjects(project),
                resolver=TemplateResolver(catalog),
                prompter=CannedPrompter(),
                cloner=StagedCloner(runner=fake_git),
                echo=lambda line: None,
                spinner=spinner,
            )

        build().create(BootstrapSession(template_name="foo", app_name="one", base_dir=tmp_path))
        assert titles == ["Cloning template from https://example.test/foo.git", "Cleaning up..."]

        titles.clear()
        build().create(
            BootstrapSession(template_name="foo", app_name="two", base_dir=tmp_path, verbose=True)
        )
        assert titles == []


class TestStandaloneFlows:
    """Tests for install, run and env on an existing application."""

    @pytest.fixture
    def app_root(self, tmp_path):
        (tmp_path / "taskfile.yaml").write_text(
            "tasks:\n  install: echo ok > installed.txt\n  dev: echo dev > dev.txt\n"
        )
        return tmp_path

    def test_install(self, app_root, make_driver):
        make_driver().install(BootstrapSession(), app_root)
        assert (app_root / "installed.txt").exists()

    def test_run_named_task(self, app_root, make_driver):
        assert make_driver().run(BootstrapSession(), app_root, "dev") == "dev"
        assert (app_root / "dev.txt").exists()

    def test_run_asks_for_task(self, app_root, make_driver):
        assert make_driver(answers={"task": "dev"}).run(BootstrapSession(), app_root) == "dev"

    def test_env(self, app_root, make_driver):
        path = make_driver().env(BootstrapSession(), app_root)

        env = read_env_file(path)
        assert env["LIVEKIT_API_KEY"] == "APIdevkey"
        assert "LIVEKIT_SANDBOX_ID" not in env

    def test_run_uses_task_runner(self, app_root, project, catalog):
        tasks = MagicMock()
        driver = BootstrapDriver(
            projects=StaticProjects(project),
            resolver=TemplateResolver(catalog),
            prompter=CannedPrompter(),
            tasks=tasks,
        )

        driver.run(BootstrapSession(verbose=True), app_root, "dev")

        tasks.run.assert_called_once_with(app_root, "dev", driver.prompter, True)
