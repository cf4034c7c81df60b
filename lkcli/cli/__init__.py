"""
Command-line interface for lkcli.
"""

from lkcli.cli.app import app as lk_app


def main() -> None:
    """Console script entry point."""
    lk_app()


__all__ = ["lk_app", "main"]
