"""Tests for the System handle and the command runner."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from elemental.domain.errors import CommandError
from elemental.infrastructure.runner import run_cmd
from elemental.infrastructure.system import System


class TestSystemPath:
    def test_host_root_is_identity(self) -> None:
        system = System()
        assert system.path("/etc/os-release") == Path("/etc/os-release")
        assert system.path("rel/path") == Path("rel/path")

    def test_rerooted(self, tmp_path: Path) -> None:
        system = System(root=tmp_path)
        assert system.path("/etc/os-release") == tmp_path / "etc" / "os-release"
        assert system.path("rel") == tmp_path / "rel"

    def test_exists(self, tmp_path: Path) -> None:
        (tmp_path / "proc").mkdir()
        (tmp_path / "proc" / "cmdline").write_text("")
        system = System(root=tmp_path)
        assert system.exists("/proc/cmdline")
        assert not system.exists("/proc/missing")


class TestRunCmd:
    def test_captures_output(self) -> None:
        result = run_cmd([sys.executable, "-c", "print('hi')"])
        assert result.returncode == 0
        assert result.stdout.strip() == "hi"

    def test_non_zero_raises(self) -> None:
        argv = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
        with pytest.raises(CommandError) as exc_info:
            run_cmd(argv)
        assert exc_info.value.returncode == 3
        assert "boom" in str(exc_info.value)

    def test_non_zero_without_check(self) -> None:
        result = run_cmd([sys.executable, "-c", "raise SystemExit(2)"], check=False)
        assert result.returncode == 2

    def test_missing_binary(self) -> None:
        with pytest.raises(CommandError) as exc_info:
            run_cmd(["/nonexistent/elemental-binary"])
        assert exc_info.value.returncode == 127
