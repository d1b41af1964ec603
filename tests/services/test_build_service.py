"""Tests for BuildService."""

from __future__ import annotations

from pathlib import Path

import pytest

from elemental.config.flags import BuildFlags
from elemental.config.settings import ElementalSettings
from elemental.engines.manager import EngineManager
from elemental.infrastructure.system import System
from elemental.services.build import DEPRECATION_WARNING, BuildService
from elemental.services.cancellation import CancelContext
from tests.conftest import FakeEngine


@pytest.fixture
def config_dir(system: System) -> Path:
    path = system.path("/config")
    path.mkdir()
    return path


@pytest.fixture
def svc(system: System, settings: ElementalSettings, engines: EngineManager) -> BuildService:
    return BuildService(system, settings, engines)


def _build_dir(system: System) -> Path:
    return system.path("_build")


class TestBuild:
    def test_success(
        self, svc: BuildService, system: System, config_dir: Path, engine: FakeEngine
    ) -> None:
        result = svc.build(BuildFlags(platform="linux/amd64"))
        assert result.ok, result.error
        assert result.warnings == [DEPRECATION_WARNING]
        image = Path(result.data["image"])
        assert image.parent == _build_dir(system)
        assert image.name.startswith("image-") and image.suffix == ".raw"
        assert result.data["platform"] == "linux/amd64"
        assert engine.calls == ["run"]
        assert engine.definition.config_dir == config_dir

    def test_workspace_lifecycle(
        self, svc: BuildService, system: System, config_dir: Path, engine: FakeEngine
    ) -> None:
        result = svc.build(BuildFlags())
        assert engine.workspace_existed
        root = engine.workspace.root
        assert root.parent == _build_dir(system)
        assert root.name.startswith("build-")
        assert str(root) == result.data["build_dir"]
        assert not root.exists()

    def test_explicit_output_and_build_dir(
        self, svc: BuildService, system: System, config_dir: Path, engine: FakeEngine
    ) -> None:
        result = svc.build(BuildFlags(build_dir="/var/tmp/b", output_path="/out/disk.raw"))
        assert result.ok, result.error
        assert Path(result.data["image"]) == system.path("/out/disk.raw")
        assert engine.workspace.root.parent == system.path("/var/tmp/b")

    def test_missing_config_dir(
        self, svc: BuildService, system: System, engine: FakeEngine
    ) -> None:
        result = svc.build(BuildFlags())
        assert result.error is not None
        assert result.error.code == "INVALID_CONFIGURATION"
        assert "reading config directory" in result.error.message
        assert not _build_dir(system).exists()
        assert engine.calls == []

    def test_unsupported_image_type(self, svc: BuildService, config_dir: Path) -> None:
        result = svc.build(BuildFlags(image_type="iso"))
        assert result.error is not None
        assert result.error.message == "image type 'iso' not supported"

    def test_malformed_platform_creates_nothing(
        self, svc: BuildService, system: System, config_dir: Path, engine: FakeEngine
    ) -> None:
        result = svc.build(BuildFlags(platform="linux"))
        assert result.error is not None
        assert result.error.code == "INVALID_PLATFORM"
        assert "malformed platform" in result.error.message
        assert not _build_dir(system).exists()
        assert engine.calls == []

    def test_engine_failure_still_cleans_up(
        self, svc: BuildService, config_dir: Path, engine: FakeEngine
    ) -> None:
        engine.fail = RuntimeError("helm chart not found")
        result = svc.build(BuildFlags())
        assert result.error is not None
        assert result.error.code == "ENGINE_FAILED"
        assert result.error.message == "build process failed: helm chart not found"
        assert not engine.workspace.root.exists()

    def test_ambient_cancellation(
        self, svc: BuildService, config_dir: Path, engine: FakeEngine
    ) -> None:
        parent = CancelContext()
        parent.cancel()
        svc.build(BuildFlags(), parent)
        assert engine.cancelled_during_run

    def test_active_context_during_run(
        self, svc: BuildService, config_dir: Path, engine: FakeEngine
    ) -> None:
        svc.build(BuildFlags())
        assert not engine.cancelled_during_run
        assert engine.ctx.cancelled
