"""
Staged template cloning.

A template is cloned into a staging directory next to the application
directory, stripped of its version-control metadata, and only then
renamed to the application directory. The staging directory is removed on
every exit path, so either the application directory exists complete or
it does not exist at all.
"""

import os
import secrets
import shutil
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from rich.console import Console

from lkcli.errors import AppDirectoryExistsError, CloneError
from lkcli.logging import get_logger

logger = get_logger(__name__)
console = Console()

# Version-control metadata removed from every clone
VCS_METADATA = (".git",)

CloneRunner = Callable[..., subprocess.CompletedProcess]


def staging_path_for(app_dir: Path) -> Path:
    """
    Allocate an unused staging path next to ``app_dir``.

    The name is derived from the application name but hidden and suffixed,
    so it can never equal the application directory.
    """
    while True:
        candidate = app_dir.with_name(f".{app_dir.name}.staging-{secrets.token_hex(4)}")
        if not os.path.lexists(candidate):
            return candidate


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif os.path.lexists(path):
        path.unlink()


@contextmanager
def staging_directory(app_dir: Path) -> Iterator[Path]:
    """Yield a staging path that is removed on exit, whatever happened inside."""
    staging = staging_path_for(app_dir)
    logger.debug(f"Staging clone at {staging}")
    try:
        yield staging
    finally:
        if os.path.lexists(staging):
            logger.debug(f"Removing staging directory {staging}")
            shutil.rmtree(staging, ignore_errors=True)


def strip_vcs_metadata(root: Path, strict: bool = True) -> None:
    """
    Remove version-control metadata from a cloned tree.

    Args:
        root: Root of the cloned tree
        strict: Raise removal errors as CloneError; when False, errors are logged and
            ignored (used while cleaning up after a failed clone)
    """
    for name in VCS_METADATA:
        target = root / name
        try:
            _remove_path(target)
        except OSError as e:
            if strict:
                raise CloneError(
                    f"cannot remove {target}: {e}",
                    error_code="CLONE-RelocateFailed",
                    details={"path": str(target)},
                ) from e
            logger.debug(f"Could not remove {target}: {e}")


def relocate(staging: Path, app_dir: Path) -> None:
    """
    Rename the staged tree to the application directory.

    Raises:
        AppDirectoryExistsError: If the application directory exists
        CloneError: If the rename fails
    """
    if os.path.lexists(app_dir):
        raise AppDirectoryExistsError(str(app_dir))
    try:
        os.rename(staging, app_dir)
    except OSError as e:
        raise CloneError(
            f"cannot move staged clone to {app_dir}: {e}",
            error_code="CLONE-RelocateFailed",
            details={"staging": str(staging), "app_dir": str(app_dir)},
        ) from e
    logger.debug(f"Relocated {staging} to {app_dir}")


class StagedCloner:
    """Clones a template URL into a fresh application directory.

    Attributes:
        depth: Clone depth passed to git
        runner: Callable with the subprocess.run signature used to run git
    """

    def __init__(self, depth: int = 1, runner: Optional[CloneRunner] = None) -> None:
        self.depth = depth
        self.runner = runner or subprocess.run

    def _run_clone(self, url: str, staging: Path) -> subprocess.CompletedProcess:
        cmd = ["git", "clone", f"--depth={self.depth}", url, str(staging)]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return self.runner(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise CloneError(
                "git not installed",
                error_code="CLONE-GitMissing",
                details={"url": url},
                suggestion="Install git and make sure it is on your PATH",
            ) from e

    def clone(self, url: str, app_dir: Path, verbose: bool = False) -> Path:
        """
        Clone ``url`` into ``app_dir``.

        Args:
            url: Template source URL
            app_dir: Final application directory; must not exist
            verbose: Print git output even on success

        Returns:
            The application directory

        Raises:
            AppDirectoryExistsError: If app_dir already exists
            CloneError: If git fails
        """
        app_dir = Path(app_dir)
        if os.path.lexists(app_dir):
            raise AppDirectoryExistsError(str(app_dir))

        with staging_directory(app_dir) as staging:
            result = self._run_clone(url, staging)
            failed = result.returncode != 0

            # Metadata goes before the result is inspected
            strip_vcs_metadata(staging, strict=not failed)

            output = (result.stdout or "").strip()
            if output and (failed or verbose):
                console.print(output, markup=False, highlight=False)

            if failed:
                raise CloneError(
                    f"git clone of {url} failed with exit status {result.returncode}",
                    returncode=result.returncode,
                    output=output,
                    error_code="CLONE-Failed",
                    details={"url": url},
                )

            relocate(staging, app_dir)

        return app_dir
