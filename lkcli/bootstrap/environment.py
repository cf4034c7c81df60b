"""
Environment reconciliation for a new or existing application.

Seeds the environment set from the active project's credentials, applies
caller extras and delegates merging with the on-disk environment file to
the dotenv instantiator, which prompts for conflicting values.
"""

from pathlib import Path
from typing import Callable, Mapping, Optional

from lkcli.bootstrap.envfile import PromptFn, instantiate_dotenv
from lkcli.bootstrap.prompts import InputRequest, Prompter
from lkcli.config.projects import ProjectConfig
from lkcli.logging import get_logger

logger = get_logger(__name__)

ENV_URL = "LIVEKIT_URL"
ENV_API_KEY = "LIVEKIT_API_KEY"
ENV_API_SECRET = "LIVEKIT_API_SECRET"
ENV_SANDBOX_ID = "LIVEKIT_SANDBOX_ID"

DotEnvInstantiator = Callable[..., Path]


def base_env(project: ProjectConfig) -> dict[str, str]:
    """The three required entries for a project."""
    return {
        ENV_URL: project.url,
        ENV_API_KEY: project.api_key,
        ENV_API_SECRET: project.api_secret,
    }


def build_env(
    project: ProjectConfig, extra: Optional[Mapping[str, str]] = None
) -> dict[str, str]:
    """Seed the environment set and apply extras; extras win on conflict."""
    env = base_env(project)
    if extra:
        env.update(extra)
    return env


def env_prompt(prompter: Prompter) -> PromptFn:
    """Adapt a Prompter to the (key, current value) -> value prompt function."""

    def prompt(key: str, current: str) -> str:
        answer = prompter.ask(
            InputRequest(
                field=f"env:{key}",
                kind="text",
                title=f"Enter {key}?",
                default=current,
            )
        )
        return str(answer) if answer else current

    return prompt


class EnvironmentReconciler:
    """Builds the environment set and hands it to the dotenv instantiator."""

    def __init__(self, instantiate: Optional[DotEnvInstantiator] = None) -> None:
        self.instantiate = instantiate or instantiate_dotenv

    def reconcile(
        self,
        root_path: Path,
        project: ProjectConfig,
        prompter: Prompter,
        extra: Optional[Mapping[str, str]] = None,
        verbose: bool = False,
    ) -> Path:
        """
        Reconcile the environment file at ``root_path``.

        Args:
            root_path: Application root
            project: Source of the URL, API key and secret
            prompter: Answers per-key conflict prompts
            extra: Additional entries, overriding the base set
            verbose: Passed to the instantiator

        Returns:
            Path of the environment file
        """
        env = build_env(project, extra)
        logger.debug(f"Reconciling {len(env)} variable(s) under {root_path}")
        return self.instantiate(Path(root_path), env, verbose, env_prompt(prompter))
