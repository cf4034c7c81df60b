"""
Global pytest configuration for lkcli.
"""

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that run real git clones"
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path_factory, monkeypatch):
    """Point settings at a throwaway config file and reset the settings cache."""
    from lkcli.config import clear_settings_cache

    config_dir = tmp_path_factory.mktemp("lk-config")
    monkeypatch.setenv("LK_CONFIG_PATH", str(config_dir / "cli-config.yaml"))
    monkeypatch.delenv("LK_LOG_DIR", raising=False)
    for name in ("LIVEKIT_URL", "LIVEKIT_API_KEY", "LIVEKIT_API_SECRET"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
