"""
lkcli Settings - runtime configuration management.

This module provides access to configuration settings with environment
variable overrides (prefix ``LK_``).
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEMPLATE_INDEX_URL = (
    "https://raw.githubusercontent.com/livekit-examples/index/main/templates.yaml"
)
DEFAULT_TEMPLATE_BASE_URL = "https://github.com/livekit-examples"
DEFAULT_CLOUD_API_URL = "https://cloud-api.livekit.io"


def _default_config_path() -> Path:
    return Path.home() / ".livekit" / "cli-config.yaml"


class BootstrapSettings(BaseSettings):
    """Settings for template resolution, cloning and credential lookup."""

    template_index_url: str = Field(default=DEFAULT_TEMPLATE_INDEX_URL)
    cloud_api_url: str = Field(default=DEFAULT_CLOUD_API_URL)
    config_path: Path = Field(default_factory=_default_config_path)
    http_timeout: float = Field(default=30.0, gt=0)
    token_ttl_seconds: int = Field(default=300, gt=0)
    clone_depth: int = Field(default=1, ge=1)
    log_dir: Optional[Path] = Field(default=None)

    model_config = SettingsConfigDict(env_prefix="LK_")


@lru_cache
def get_settings() -> BootstrapSettings:
    """Get cached bootstrap settings."""
    return BootstrapSettings()


def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    get_settings.cache_clear()
