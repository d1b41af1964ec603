"""Tests for --examples flag on CLI commands.

Parametrized to cover all commands that define examples text.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from elemental.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["install", "--examples"], ["elemental install --target /dev/sda", "--snapshotter overwrite"]),
    (["reset", "--examples"], ["elemental reset", "--no-verify"]),
    (["build", "--examples"], ["elemental build --config-dir", "--platform linux/arm64"]),
    (["customize", "--examples"], ["--mode split", "--type raw"]),
    (["kmod", "--examples"], ["elemental kmod --unload", "elemental kmod --reload"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    args, _ = item
    return "_".join(a for a in args if a != "--examples")


@pytest.mark.parametrize(
    ("args", "expected"),
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples(cli_runner: CliRunner, args: list[str], expected: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "Examples for" in result.output
    for keyword in expected:
        assert keyword in result.output
