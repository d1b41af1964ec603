"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from elemental.cli import cli

_DEPLOYMENT_FLAGS = [
    "--os-image",
    "--overlay",
    "--config",
    "--description",
    "--bootloader",
    "--cmdline",
    "--crypto-policy",
    "--snapshotter",
    "--create-boot-entry",
    "--no-verify",
    "--local",
]

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--help"], ["install", "reset", "build", "customize", "kmod", "--log-file", "--json"]),
    (["install", "--help"], ["--target", *_DEPLOYMENT_FLAGS]),
    (["reset", "--help"], _DEPLOYMENT_FLAGS),
    (["build", "--help"], ["--config-dir", "--build-dir", "--type", "--platform", "--output"]),
    (["customize", "--help"], ["--type", "--config-dir", "--mode", "--output", "--platform"]),
    (["kmod", "--help"], ["--reload", "--unload"]),
]


@pytest.mark.parametrize(
    ("args", "expected"),
    HELP_COMMANDS,
    ids=["_".join(args[:-1]) or "root" for args, _ in HELP_COMMANDS],
)
def test_help(cli_runner: CliRunner, args: list[str], expected: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    for keyword in expected:
        assert keyword in result.output


def test_reset_has_no_target_option(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["reset", "--help"])
    assert "--target" not in result.output
