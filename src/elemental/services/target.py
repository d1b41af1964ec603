"""Reset target discovery.

A reset runs from the recovery system, which lives on the disk being reset.
The partition mounted at the live mount point therefore names the target
disk, and that disk becomes the device of the deployment's system disk.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from elemental.domain.errors import BlockDeviceError, TargetResolutionError
from elemental.infrastructure.block import get_partition_by_mount_point

if TYPE_CHECKING:
    from elemental.domain.deployment import Deployment
    from elemental.infrastructure.system import System

logger = logging.getLogger(__name__)


def resolve_reset_target(
    system: System,
    deployment: Deployment,
    mount_point: str,
    *,
    attempts: int = 1,
) -> str:
    """Point the system disk of *deployment* at the disk backing *mount_point*.

    Returns the device path that was set.

    Raises:
        TargetResolutionError: no single partition is mounted at
            *mount_point*, it has no parent disk, or *deployment* has no
            system partition.
    """
    try:
        part = get_partition_by_mount_point(system, mount_point, attempts=attempts)
    except BlockDeviceError as exc:
        raise TargetResolutionError(
            f"partition for the live mount point not found: {exc}"
        ) from exc

    disk = deployment.get_system_disk()
    if disk is None:
        raise TargetResolutionError("no system partition found in deployment")
    if not part.disk:
        raise TargetResolutionError(f"no parent disk found for partition {part.path}")

    disk.device = part.disk
    logger.info("Reset target disk is %s (live partition %s)", part.disk, part.path)
    return part.disk
