"""CLI state management.

Provides a typed, immutable state object that holds CLI-wide configuration.
State is passed through the Typer context to commands.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CLIState:
    """Immutable state object for CLI-wide configuration.

    Populated by the root Typer callback and stored in `ctx.obj` for
    commands to access.

    Attributes:
        verbose: If True, show debug output and process output.
        interactive: If False, missing input fails instead of prompting.
        project: Name of a configured project to use.
        url: Explicit service URL.
        api_key: Explicit API key.
        api_secret: Explicit API secret.
    """

    verbose: bool = False
    interactive: bool = True
    project: Optional[str] = None
    url: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
