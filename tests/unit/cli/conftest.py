"""Fixtures for exercising the `lk` command line."""

import re
from dataclasses import dataclass
from typing import Optional

import pytest
from typer.testing import CliRunner

_STYLE_CODES = re.compile(r"\x1b\[[0-9;]*m")


@dataclass
class PlainResult:
    """Invocation result with terminal styling removed.

    Help text keeps bold/dim codes even with NO_COLOR set, so assertions
    run against the stripped text.
    """

    exit_code: int
    output: str
    exception: Optional[BaseException]


class PlainCliRunner(CliRunner):
    """CliRunner whose results carry unstyled output."""

    def invoke(self, *args, **kwargs) -> PlainResult:
        result = super().invoke(*args, **kwargs)
        return PlainResult(
            exit_code=result.exit_code,
            output=_STYLE_CODES.sub("", result.output),
            exception=result.exception,
        )


@pytest.fixture
def runner():
    """Runner with colors off and a terminal wide enough that nothing wraps."""
    return PlainCliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})
