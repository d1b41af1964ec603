"""Tests for the customize command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from elemental.cli import cli
from elemental.infrastructure.system import System
from tests.conftest import FakeEngine


class TestCustomizeCommand:
    def test_embedded_iso(
        self, cli_runner: CliRunner, cli_system: System, cli_engine: FakeEngine
    ) -> None:
        cli_system.path("/config").mkdir()
        result = cli_runner.invoke(cli, ["--json", "customize"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)["data"]
        assert data["media_type"] == "iso"
        assert data["mode"] == "embedded"
        assert data["config_dir"] is None
        assert Path(data["image"]).suffix == ".iso"
        assert cli_engine.calls == ["run"]
        assert not cli_engine.workspace.root.exists()

    def test_split_raw(
        self, cli_runner: CliRunner, cli_system: System, cli_engine: FakeEngine
    ) -> None:
        cli_system.path("/config").mkdir()
        result = cli_runner.invoke(
            cli,
            ["--json", "customize", "--type", "raw", "--mode", "split", "-o", "/out/media.raw"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)["data"]
        assert data["image"] == str(cli_system.path("/out/media.raw"))
        assert data["config_dir"] == str(cli_system.path("/out/media-config"))
        assert cli_system.path("/out/media-config").is_dir()

    def test_unknown_mode_rejected(self, cli_runner: CliRunner, cli_engine: FakeEngine) -> None:
        result = cli_runner.invoke(cli, ["customize", "--mode", "inline"])
        assert result.exit_code == 2

    def test_invalid_platform(
        self, cli_runner: CliRunner, cli_system: System, cli_engine: FakeEngine
    ) -> None:
        cli_system.path("/config").mkdir()
        result = cli_runner.invoke(cli, ["customize", "--platform", "windows/amd64"])
        assert result.exit_code == 1
        assert "error parsing platform" in result.stderr
        assert cli_engine.calls == []
