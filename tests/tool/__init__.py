"""Test helpers for policy-nucleus tools."""

import pytest

from policy_nucleus.tool import nucleus


def run_command(args: list[str], capsys: pytest.CaptureFixture[str]) -> str:
    """Run the command line tool and return its output."""
    nucleus.main(args)
    return capsys.readouterr().out
