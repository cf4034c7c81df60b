"""
Version information for lkcli.

The package version is kept here as the single source of truth and
mirrored in pyproject.toml.
"""

__version__ = "0.3.0"


def get_version() -> str:
    """
    Get the current version of the lkcli package.

    Returns:
        str: Current version string
    """
    return __version__
