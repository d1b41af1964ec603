"""Scoped working directories for build and customize runs.

INVARIANT: A workspace is owned by the action that created it and is removed
exactly once, after the execution engine returns, whatever the outcome.
Cleanup failures are logged and never replace the action's own result.

Layout::

    <root>/
        overlays/   files layered onto the image
        iso/        extracted installer media (customize only)
        config/     embedded configuration (unless split mode relocates it)
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from elemental.domain.errors import WorkspaceError

logger = logging.getLogger(__name__)

# Lexicographic order matches chronological order.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


def timestamp(now: datetime | None = None) -> str:
    """UTC timestamp with second precision, safe for file names."""
    return (now or datetime.now(UTC)).astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def default_image_path(base: Path, image_type: str, *, now: datetime | None = None) -> Path:
    """``<base>/image-<timestamp>.<type>``."""
    return base / f"image-{timestamp(now)}.{image_type}"


def split_config_dir(image_path: Path) -> Path:
    """``<dir>/<image-stem>-config`` next to the image."""
    return image_path.parent / f"{image_path.stem}-config"


def build_root(build_dir: Path, *, now: datetime | None = None) -> Path:
    """A fresh ``build-<timestamp>`` directory under *build_dir*."""
    return build_dir / f"build-{timestamp(now)}"


@dataclass(frozen=True)
class Workspace:
    root: Path
    split_config: Path | None = None

    @property
    def overlays_dir(self) -> Path:
        return self.root / "overlays"

    @property
    def iso_store_dir(self) -> Path:
        return self.root / "iso"

    @property
    def config_dir(self) -> Path:
        """The split configuration directory, or ``<root>/config`` when embedded."""
        return self.split_config or self.root / "config"

    @classmethod
    def create(
        cls,
        root: Path | None = None,
        config_dir: Path | None = None,
        *,
        work_dir: Path | None = None,
    ) -> Workspace:
        """Create the workspace tree.

        A *root* of None allocates a temporary directory under *work_dir*
        (system temp dir when None). An explicit *root* must not exist yet.

        Raises:
            WorkspaceError: a directory cannot be created.
        """
        try:
            if root is None:
                if work_dir is not None:
                    work_dir.mkdir(parents=True, exist_ok=True)
                root = Path(tempfile.mkdtemp(prefix="elemental-", dir=work_dir))
            else:
                root.mkdir(parents=True, exist_ok=False)
        except OSError as exc:
            raise WorkspaceError(f"creating working directory {root}: {exc}") from exc

        ws = cls(root=root, split_config=config_dir)
        try:
            ws.overlays_dir.mkdir()
            if config_dir is not None:
                config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            shutil.rmtree(root, ignore_errors=True)
            raise WorkspaceError(f"populating working directory {root}: {exc}") from exc

        logger.debug("Created working directory %s", root)
        return ws

    def ensure_iso_store(self) -> Path:
        """Create and return the ISO store directory."""
        try:
            self.iso_store_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WorkspaceError(f"creating ISO store directory: {exc}") from exc
        return self.iso_store_dir

    def cleanup(self) -> None:
        """Remove the workspace root. The split config directory is kept.

        Raises:
            OSError: removal failed.
        """
        if self.root.exists():
            shutil.rmtree(self.root)


@contextmanager
def open_workspace(
    root: Path | None = None,
    config_dir: Path | None = None,
    *,
    work_dir: Path | None = None,
) -> Iterator[Workspace]:
    """Create a workspace and remove it when the block exits."""
    ws = Workspace.create(root, config_dir, work_dir=work_dir)
    try:
        yield ws
    finally:
        logger.debug("Cleaning up working directory %s", ws.root)
        try:
            ws.cleanup()
        except OSError:
            logger.error("Cleaning up working directory %s failed", ws.root, exc_info=True)
