"""
Environment file instantiation.

Writes ``.env.local`` at an application root from an environment set,
using ``.env.example`` as the template of expected keys and the existing
``.env.local`` as prior state. Conflicting or unknown values are settled
through a prompt function.
"""

import re
from pathlib import Path
from typing import Callable, Mapping, Optional

from dotenv import dotenv_values

from lkcli.errors import DotEnvError
from lkcli.logging import get_logger

logger = get_logger(__name__)

ENV_EXAMPLE_FILE = ".env.example"
ENV_LOCAL_FILE = ".env.local"

# (key, current value) -> value to store
PromptFn = Callable[[str, str], str]

# Values made only of these characters are written unquoted
_BARE_VALUE = re.compile(r"^[A-Za-z0-9_./:@+,=%-]*$")


def read_env_file(path: Path) -> dict[str, str]:
    """
    Read a dotenv file, preserving key order.

    Keys without a value read as empty strings. A missing file reads as
    an empty mapping.

    Raises:
        DotEnvError: If the path is a directory or cannot be read
    """
    if not path.exists():
        return {}
    if path.is_dir():
        raise DotEnvError(
            f"{path.name} is a directory",
            error_code="DOTENV-NotAFile",
            details={"path": str(path)},
        )
    try:
        values = dotenv_values(path, interpolate=False)
    except (OSError, UnicodeDecodeError) as e:
        raise DotEnvError(
            f"cannot read {path}: {e}",
            error_code="DOTENV-Unreadable",
            details={"path": str(path)},
        ) from e
    return {key: value or "" for key, value in values.items()}


def format_env_value(value: str) -> str:
    if _BARE_VALUE.match(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def render_env(env: Mapping[str, str]) -> str:
    """Render an environment mapping as dotenv text, one KEY=value per line."""
    return "".join(f"{key}={format_env_value(value)}\n" for key, value in env.items())


def merge_env(
    prior: Mapping[str, str],
    example: Mapping[str, str],
    env: Mapping[str, str],
    prompt: PromptFn,
) -> dict[str, str]:
    """
    Merge prior, example and new values into the environment to write.

    - Prior values (from the existing file) are kept; when a prior value is
      non-empty and differs from the new value, ``prompt(key, prior)``
      decides, so an empty or declined answer keeps the prior value.
    - New values fill keys without a prior value.
    - Example keys that are neither in the prior file nor in the new set
      are prompted for with the example value as default.

    Order: prior keys, then example keys, then new keys.
    """
    merged: dict[str, str] = {}

    for key, old_value in prior.items():
        if key in env and old_value and env[key] != old_value:
            merged[key] = prompt(key, old_value) or old_value
        elif key in env and not old_value:
            merged[key] = env[key]
        else:
            merged[key] = old_value

    for key, example_value in example.items():
        if key in merged:
            continue
        if key in env:
            merged[key] = env[key]
        else:
            merged[key] = prompt(key, example_value) or example_value

    for key, value in env.items():
        if key not in merged:
            merged[key] = value

    return merged


def instantiate_dotenv(
    root_path: Path,
    env: Mapping[str, str],
    verbose: bool = False,
    prompt: Optional[PromptFn] = None,
) -> Path:
    """
    Create or update ``.env.local`` under ``root_path``.

    Args:
        root_path: Application root
        env: Environment set to apply
        verbose: Log the written keys at INFO level
        prompt: Resolves conflicting or missing values; without one, prior
            and example values are kept

    Returns:
        Path of the environment file

    Raises:
        DotEnvError: If an environment file cannot be read or written
    """
    root_path = Path(root_path)
    local_path = root_path / ENV_LOCAL_FILE
    prompt_fn = prompt or (lambda _key, current: current)

    prior = read_env_file(local_path)
    example = read_env_file(root_path / ENV_EXAMPLE_FILE)
    merged = merge_env(prior, example, env, prompt_fn)

    content = render_env(merged)
    try:
        if local_path.exists() and local_path.read_text(encoding="utf-8") == content:
            logger.debug(f"{local_path} is up to date")
            return local_path
        local_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise DotEnvError(
            f"cannot write {local_path}: {e}",
            error_code="DOTENV-Unwritable",
            details={"path": str(local_path)},
        ) from e

    message = f"Wrote {len(merged)} variable(s) to {local_path}"
    if verbose:
        logger.info(f"{message}: {', '.join(merged)}")
    else:
        logger.debug(message)
    return local_path
