"""
Configuration for lkcli: runtime settings and stored project credentials.
"""

from lkcli.config.projects import (
    CLIConfig,
    ProjectConfig,
    load_cli_config,
    load_project_details,
    save_cli_config,
)
from lkcli.config.settings import BootstrapSettings, clear_settings_cache, get_settings

__all__ = [
    "BootstrapSettings",
    "get_settings",
    "clear_settings_cache",
    "CLIConfig",
    "ProjectConfig",
    "load_cli_config",
    "save_cli_config",
    "load_project_details",
]
