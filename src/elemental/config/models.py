"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, the config file only contains
overrides. A stock installation needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel


class LiveConfig(BaseModel):
    """[live] section: well-known locations on install/recovery media."""

    model_config = {"frozen": True}

    mount_point: str = "/run/initramfs/live"
    squashfs_path: str = "/run/initramfs/live/LiveOS/squashfs.img"
    description_path: str = "/run/initramfs/live/install/install.yaml"
    cmdline_path: str = "/proc/cmdline"
    recovery_mark: str = "elemental.recovery"


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    build_dir: str = "_build"
    config_dir: str = "/config"


class WorkspaceConfig(BaseModel):
    """[workspace] section."""

    model_config = {"frozen": True}

    # Parent of temporary working directories; None uses the system temp dir.
    work_dir: str | None = None
