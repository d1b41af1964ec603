"""Shared service-layer helper functions."""

from __future__ import annotations

from typing import Any

from elemental.domain.deployment import Deployment


def deployment_summary(deployment: Deployment) -> dict[str, Any]:
    """Key facts of a resolved deployment for result payloads."""
    disk = deployment.get_system_disk()
    boot = deployment.boot_config
    return {
        "target": disk.device if disk is not None else "",
        "source_os": str(deployment.source_os) if deployment.source_os else "",
        "overlay": str(deployment.overlay_tree) if deployment.overlay_tree else "",
        "bootloader": boot.bootloader if boot is not None else "",
        "kernel_cmdline": boot.kernel_cmdline if boot is not None else "",
        "snapshotter": deployment.snapshotter.name,
        "crypto_policy": str(deployment.security.crypto_policy),
        "boot_entries": [entry.label for entry in deployment.firmware.boot_entries],
    }
