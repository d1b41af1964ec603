"""Per-invocation flag records.

Each command builds exactly one frozen record from its Click options and
passes it down the call chain. Empty strings, ``False`` and ``None`` mean
"not specified"; the resolver treats them as no-ops.
"""

from __future__ import annotations

from pydantic import BaseModel


class InstallFlags(BaseModel):
    """Flags shared by ``install`` and ``reset``."""

    model_config = {"frozen": True}

    target: str = ""
    os_image: str = ""
    overlay: str = ""
    config_script: str = ""
    description: str = ""
    bootloader: str = ""
    kernel_cmdline: str = ""
    crypto_policy: str = ""
    snapshotter: str = ""
    create_boot_entry: bool = False
    verify: bool = True
    local: bool = False


class BuildFlags(BaseModel):
    model_config = {"frozen": True}

    config_dir: str = ""
    build_dir: str = ""
    image_type: str = "raw"
    platform: str = ""
    output_path: str = ""
    local: bool = False


class CustomizeFlags(BaseModel):
    model_config = {"frozen": True}

    config_dir: str = ""
    output_path: str = ""
    mode: str = "embedded"
    platform: str = ""
    media_type: str = "iso"
    local: bool = False


class KmodFlags(BaseModel):
    model_config = {"frozen": True}

    reload: bool = False
    unload: bool = False
