"""Shared pytest fixtures and test helpers for elemental tests."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Generator, Sequence
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from elemental.config.models import LiveConfig
from elemental.config.settings import ElementalSettings
from elemental.domain.errors import CommandError
from elemental.domain.platform import Platform
from elemental.engines.hookspecs import hookimpl
from elemental.engines.manager import EngineManager
from elemental.infrastructure.runner import CmdResult
from elemental.infrastructure.system import System

LIVE = LiveConfig()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    elemental = logging.getLogger("elemental")
    elemental_level = elemental.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    elemental.setLevel(elemental_level)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host ELEMENTAL_* variables out of settings resolution."""
    for name in list(os.environ):
        if name.startswith("ELEMENTAL_"):
            monkeypatch.delenv(name)


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


class FakeRunner:
    """Records commands and answers them from canned outputs keyed by argv[0]."""

    def __init__(self, outputs: dict[str, str] | None = None, fail: set[str] | None = None):
        self.outputs = outputs or {}
        self.fail = fail or set()
        self.calls: list[list[str]] = []

    def __call__(self, argv: Sequence[str], *, check: bool = True) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        if argv[0] in self.fail:
            if check:
                raise CommandError(argv, 1, f"{argv[0]} failed")
            return CmdResult(argv=argv, returncode=1, stdout="", stderr=f"{argv[0]} failed")
        return CmdResult(argv=argv, returncode=0, stdout=self.outputs.get(argv[0], ""), stderr="")


def lsblk_json(*partitions: dict[str, Any]) -> str:
    """Build ``lsblk -J`` output with *partitions* as children of /dev/sda."""
    children = [
        {
            "label": None,
            "partlabel": None,
            "partuuid": None,
            "size": 1024,
            "fstype": None,
            "mountpoints": [None],
            "pkname": "/dev/sda",
            "type": "part",
            **part,
        }
        for part in partitions
    ]
    disk = {
        "path": "/dev/sda",
        "pkname": None,
        "type": "disk",
        "mountpoints": [None],
        "children": children,
    }
    return json.dumps({"blockdevices": [disk]})


# ---------------------------------------------------------------------------
# System handles
# ---------------------------------------------------------------------------


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def system(tmp_path: Path, runner: FakeRunner) -> System:
    """System rooted at a temporary directory, not on live media."""
    root = tmp_path / "root"
    root.mkdir()
    return System(root=root, runner=runner, platform=Platform.parse("linux/amd64"))


def make_live(system: System, *, recovery: bool = False, description: str | None = None) -> None:
    """Turn *system* into booted live media, optionally the recovery system."""
    squashfs = system.path(LIVE.squashfs_path)
    squashfs.parent.mkdir(parents=True, exist_ok=True)
    squashfs.write_bytes(b"")
    cmdline = "BOOT_IMAGE=/boot/vmlinuz rd.live.image"
    if recovery:
        cmdline += f" {LIVE.recovery_mark}"
    cmdline_path = system.path(LIVE.cmdline_path)
    cmdline_path.parent.mkdir(parents=True, exist_ok=True)
    cmdline_path.write_text(cmdline + "\n")
    if description is not None:
        desc = system.path(LIVE.description_path)
        desc.parent.mkdir(parents=True, exist_ok=True)
        desc.write_text(description)


@pytest.fixture
def settings() -> ElementalSettings:
    return ElementalSettings.from_cli()


# ---------------------------------------------------------------------------
# Fake engines
# ---------------------------------------------------------------------------


class FakeEngine:
    """Engine plugin that plays every engine role and records what it saw."""

    def __init__(
        self,
        *,
        modules: Sequence[str] = (),
        fail: Exception | None = None,
    ) -> None:
        self.modules = list(modules)
        self.fail = fail
        self.calls: list[str] = []
        self.ctx: Any = None
        self.flags: Any = None
        self.deployment: Any = None
        self.definition: Any = None
        self.workspace: Any = None
        self.workspace_existed = False
        self.cancelled_during_run = False
        self.unloaded: list[str] = []
        self.reloaded: list[str] = []

    # -- hooks -----------------------------------------------------------

    @hookimpl
    def elemental_installer(self, ctx: Any, system: Any, deployment: Any, flags: Any) -> Any:
        self.ctx = ctx
        self.flags = flags
        return self

    @hookimpl
    def elemental_builder(self, ctx: Any, system: Any, flags: Any) -> Any:
        self.ctx = ctx
        return self

    @hookimpl
    def elemental_customizer(self, ctx: Any, system: Any, workspace: Any, flags: Any) -> Any:
        self.ctx = ctx
        return self

    @hookimpl
    def elemental_kmod_manager(self, ctx: Any, system: Any) -> Any:
        self.ctx = ctx
        return self

    # -- engine API ------------------------------------------------------

    def install(self, deployment: Any) -> None:
        self.deployment = deployment
        self._record("install")

    def reset(self, deployment: Any) -> None:
        self.deployment = deployment
        self._record("reset")

    def run(self, ctx: Any, definition: Any, workspace: Any) -> None:
        self.definition = definition
        self.workspace = workspace
        self.workspace_existed = workspace.root.is_dir()
        self.cancelled_during_run = ctx.cancelled
        self._record("run")

    def list_modules(self) -> list[str]:
        self.calls.append("list_modules")
        return self.modules

    def unload(self, ctx: Any, modules: list[str]) -> None:
        self.unloaded = list(modules)
        self._record("unload")

    def reload(self, ctx: Any, modules: list[str]) -> None:
        self.reloaded = list(modules)
        self._record("reload")

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail is not None:
            raise self.fail


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def engines(engine: FakeEngine) -> EngineManager:
    """EngineManager with the fake engine registered."""
    manager = EngineManager()
    manager.register_plugin(engine, name="fake")
    return manager


@pytest.fixture
def cli_engine(monkeypatch: pytest.MonkeyPatch) -> FakeEngine:
    """Make CLI invocations discover a fake engine instead of entry points."""
    fake = FakeEngine()

    def _discover(self: EngineManager) -> list[str]:
        self.register_plugin(fake, name="fake")
        self._loaded = True
        return self.list_plugin_names()

    monkeypatch.setattr(EngineManager, "discover_and_load", _discover)
    return fake


# ---------------------------------------------------------------------------
# Description files
# ---------------------------------------------------------------------------

MINIMAL_DESCRIPTION = """\
sourceOS: registry.example.com/uc/os:6.2
disks:
  - device: /dev/vda
    partitions:
      - label: EFI
        role: efi
        fileSystem: vfat
        size: 1024
        mountPoint: /boot/efi
      - label: SYSTEM
        role: system
        fileSystem: btrfs
        size: 0
        rwVolumes:
          - path: /var
            noCopyOnWrite: true
          - path: /etc
            snapshotted: true
"""


def write_description(path: Path, content: str = MINIMAL_DESCRIPTION) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def cli_system(monkeypatch: pytest.MonkeyPatch, system: System) -> System:
    """Make CLI invocations act on the temporary system root."""
    from elemental.commands._context import AppContext

    monkeypatch.setattr(AppContext, "system", property(lambda self: system))
    return system
