"""Block device enumeration via ``lsblk`` JSON output.

Only partitions are reported; nested ``children`` entries are flattened so
a partition under a disk (or under a dm/loop device) is found the same way.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from elemental.domain.errors import BlockDeviceError, CommandError

if TYPE_CHECKING:
    from elemental.infrastructure.system import System

logger = logging.getLogger(__name__)

LSBLK_COLUMNS = "LABEL,PARTLABEL,PARTUUID,SIZE,FSTYPE,MOUNTPOINTS,PATH,PKNAME,TYPE"


@dataclass(frozen=True)
class BlockPartition:
    path: str
    disk: str
    label: str = ""
    part_label: str = ""
    part_uuid: str = ""
    size: int = 0
    fs_type: str = ""
    mount_points: list[str] = field(default_factory=list)


def _mount_points(entry: dict[str, Any]) -> list[str]:
    points = entry.get("mountpoints")
    if points is None:
        single = entry.get("mountpoint")
        points = [single] if single else []
    return [p for p in points if p]


def _flatten(entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
    flat: list[dict[str, Any]] = []
    for entry in entries:
        flat.append(entry)
        flat.extend(_flatten(entry.get("children") or []))
    return flat


def parse_lsblk(output: str) -> list[BlockPartition]:
    """Parse ``lsblk -J`` output into partitions.

    Raises:
        BlockDeviceError: output is not the expected JSON document.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise BlockDeviceError(f"invalid lsblk output: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("blockdevices"), list):
        raise BlockDeviceError("invalid lsblk output: missing 'blockdevices'")

    partitions: list[BlockPartition] = []
    for entry in _flatten(data["blockdevices"]):
        if entry.get("type") != "part":
            continue
        partitions.append(
            BlockPartition(
                path=entry.get("path") or "",
                disk=entry.get("pkname") or "",
                label=entry.get("label") or "",
                part_label=entry.get("partlabel") or "",
                part_uuid=entry.get("partuuid") or "",
                size=int(entry.get("size") or 0),
                fs_type=entry.get("fstype") or "",
                mount_points=_mount_points(entry),
            )
        )
    return partitions


def list_partitions(system: System) -> list[BlockPartition]:
    """Return every partition known to the block layer."""
    try:
        result = system.runner(["lsblk", "-p", "-b", "-n", "-J", "-o", LSBLK_COLUMNS])
    except CommandError as exc:
        raise BlockDeviceError(f"listing block devices: {exc}") from exc
    return parse_lsblk(result.stdout)


def get_partition_by_mount_point(
    system: System,
    mount_point: str,
    *,
    attempts: int = 1,
    delay: float = 1.0,
) -> BlockPartition:
    """Return the single partition mounted at *mount_point*.

    Retries up to *attempts* times to give udev a chance to settle.

    Raises:
        BlockDeviceError: zero or multiple partitions match, or lsblk fails.
    """
    last_error: BlockDeviceError | None = None
    for attempt in range(1, attempts + 1):
        try:
            matches = [p for p in list_partitions(system) if mount_point in p.mount_points]
        except BlockDeviceError as exc:
            last_error = exc
        else:
            if len(matches) == 1:
                return matches[0]
            if matches:
                paths = ", ".join(p.path for p in matches)
                raise BlockDeviceError(f"multiple partitions mounted at {mount_point}: {paths}")
            last_error = BlockDeviceError(f"no partition mounted at {mount_point}")

        if attempt < attempts:
            logger.debug(
                "Partition lookup for %s failed, retrying (%d/%d)", mount_point, attempt, attempts
            )
            time.sleep(delay)

    assert last_error is not None
    raise last_error
