"""Deployment descriptor: what gets installed where, and how it boots.

Model attributes map 1:1 to the camelCase keys of a description file::

    disks:
    - device: /dev/sda
      partitions:
      - label: EFI
        role: efi            # ``function`` is accepted as an alias
        fileSystem: vfat
        size: 1024
        mountPoint: /boot/efi
      - label: SYSTEM
        role: system
        fileSystem: btrfs
        mountPoint: /
    bootConfig:
      bootloader: grub
      kernelCmdline: console=ttyS0
    sourceOS: registry.example.org/os:6.2

Lifecycle: created by :func:`default_deployment` (install) or bare (reset),
replaced by :func:`load_description`, mutated by the flag overlay and
finally locked by :meth:`Deployment.sanitize`.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, PrivateAttr, ValidationError
from pydantic.alias_generators import to_camel
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from elemental.domain.errors import (
    DescriptionError,
    FrozenDeploymentError,
    InconsistentDeploymentError,
    SourceURIError,
)
from elemental.domain.platform import Platform
from elemental.domain.security import CryptoPolicy
from elemental.domain.source import ImageSource

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class PartRole(StrEnum):
    SYSTEM = "system"
    EFI = "efi"
    RECOVERY = "recovery"
    DATA = "data"


class FileSystem(StrEnum):
    BTRFS = "btrfs"
    EXT2 = "ext2"
    EXT4 = "ext4"
    XFS = "xfs"
    VFAT = "vfat"


BOOTLOADER_GRUB = "grub"
BOOTLOADER_NONE = "none"
BOOTLOADERS = frozenset({BOOTLOADER_GRUB, BOOTLOADER_NONE})

SNAPSHOTTER_SNAPPER = "snapper"
SNAPSHOTTER_OVERWRITE = "overwrite"
SNAPSHOTTERS = frozenset({SNAPSHOTTER_SNAPPER, SNAPSHOTTER_OVERWRITE})

# Size 0 means "use the rest of the disk".
ALL_AVAILABLE_SIZE = 0


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class _DeploymentModel(BaseModel):
    """Base for descriptor models: camelCase keys and a lockable state."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "validate_assignment": True,
    }

    _locked: bool = PrivateAttr(default=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and getattr(self, "_locked", False):
            msg = f"cannot set {name!r}: deployment is read-only after sanitization"
            raise FrozenDeploymentError(msg)
        super().__setattr__(name, value)

    def lock(self) -> None:
        """Make this model and every nested model read-only."""
        for name in type(self).model_fields:
            value = getattr(self, name)
            items = value if isinstance(value, list) else [value]
            for item in items:
                if isinstance(item, _DeploymentModel):
                    item.lock()
        self._locked = True

    @property
    def locked(self) -> bool:
        return self._locked


class RWVolume(_DeploymentModel):
    """A read-write subvolume inside a snapshotted partition."""

    path: str
    snapshotted: bool = False
    no_copy_on_write: bool = False
    mount_opts: list[str] = Field(default_factory=list)


class Partition(_DeploymentModel):
    label: str = ""
    role: PartRole = Field(
        default=PartRole.DATA,
        validation_alias=AliasChoices("role", "function"),
    )
    file_system: FileSystem = FileSystem.BTRFS
    size: int = Field(default=ALL_AVAILABLE_SIZE, ge=0)
    mount_point: str = ""
    mount_opts: list[str] = Field(default_factory=list)
    rw_volumes: list[RWVolume] = Field(default_factory=list)


class Disk(_DeploymentModel):
    device: str = ""
    partitions: list[Partition] = Field(default_factory=list)


class BootConfig(_DeploymentModel):
    bootloader: str = BOOTLOADER_GRUB
    kernel_cmdline: str = ""


class SecurityConfig(_DeploymentModel):
    crypto_policy: CryptoPolicy = CryptoPolicy.DEFAULT


class SnapshotterConfig(_DeploymentModel):
    name: str = ""


class EfiBootEntry(_DeploymentModel):
    label: str
    loader: str
    disk: str


class FirmwareConfig(_DeploymentModel):
    boot_entries: list[EfiBootEntry] = Field(default_factory=list)


class Deployment(_DeploymentModel):
    """The fully resolved deployment specification driving install and reset."""

    disks: list[Disk] = Field(default_factory=list)
    boot_config: BootConfig | None = None
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    snapshotter: SnapshotterConfig = Field(default_factory=SnapshotterConfig)
    source_os: ImageSource | None = Field(
        default=None,
        validation_alias=AliasChoices("sourceOS", "source_os"),
        serialization_alias="sourceOS",
    )
    overlay_tree: ImageSource | None = None
    cfg_script: str = ""
    firmware: FirmwareConfig = Field(default_factory=FirmwareConfig)

    # -- lookups ----------------------------------------------------------

    def get_system_disk(self) -> Disk | None:
        """The disk holding the system partition, if any."""
        for disk in self.disks:
            if any(p.role is PartRole.SYSTEM for p in disk.partitions):
                return disk
        return None

    def get_system_partition(self) -> Partition | None:
        for disk in self.disks:
            for part in disk.partitions:
                if part.role is PartRole.SYSTEM:
                    return part
        return None

    def is_fips_enabled(self) -> bool:
        return self.security.crypto_policy is CryptoPolicy.FIPS

    # -- validation -------------------------------------------------------

    def sanitize(self) -> None:
        """Cross-validate the merged descriptor, fill derived defaults, then lock.

        Raises:
            InconsistentDeploymentError: the first inconsistency found.
        """
        if not self.disks:
            raise InconsistentDeploymentError("no disks defined")

        partitions = [p for disk in self.disks for p in disk.partitions]
        _expect_one(partitions, PartRole.SYSTEM, "system")
        _expect_one(partitions, PartRole.EFI, "EFI")
        if sum(1 for p in partitions if p.role is PartRole.RECOVERY) > 1:
            raise InconsistentDeploymentError("multiple recovery partitions defined")

        for disk in self.disks:
            _check_disk_layout(disk)
        _check_unique((p.label for p in partitions), "partition label")
        _check_unique((p.mount_point for p in partitions), "mount point")

        for part in partitions:
            if part.role is PartRole.EFI and part.file_system is not FileSystem.VFAT:
                msg = f"EFI partition must use vfat, found {part.file_system}"
                raise InconsistentDeploymentError(msg)
            _check_rw_volumes(part)

        system_disk = self.get_system_disk()
        system_part = self.get_system_partition()
        assert system_disk is not None and system_part is not None
        if not system_disk.device:
            raise InconsistentDeploymentError("no target device defined for the system disk")
        if not system_part.mount_point:
            system_part.mount_point = "/"

        if self.source_os is None:
            raise InconsistentDeploymentError("no OS image source defined")

        if not self.snapshotter.name:
            self.snapshotter.name = SNAPSHOTTER_SNAPPER
        if self.snapshotter.name not in SNAPSHOTTERS:
            raise InconsistentDeploymentError(f"unsupported snapshotter {self.snapshotter.name!r}")
        if (
            self.snapshotter.name == SNAPSHOTTER_SNAPPER
            and system_part.file_system is not FileSystem.BTRFS
        ):
            msg = f"snapper requires a btrfs system partition, found {system_part.file_system}"
            raise InconsistentDeploymentError(msg)

        if self.boot_config is None:
            self.boot_config = BootConfig()
        if self.boot_config.bootloader not in BOOTLOADERS:
            raise InconsistentDeploymentError(
                f"unsupported bootloader {self.boot_config.bootloader!r}"
            )

        self.lock()


def _expect_one(partitions: list[Partition], role: PartRole, name: str) -> None:
    count = sum(1 for p in partitions if p.role is role)
    if count == 0:
        raise InconsistentDeploymentError(f"no {name} partition defined")
    if count > 1:
        raise InconsistentDeploymentError(f"multiple {name} partitions defined ({count})")


def _check_disk_layout(disk: Disk) -> None:
    for part in disk.partitions[:-1]:
        if part.size == ALL_AVAILABLE_SIZE:
            msg = (
                f"partition {part.label or part.role!s} on {disk.device or 'system disk'} "
                "uses the remaining space but is not the last partition"
            )
            raise InconsistentDeploymentError(msg)


def _check_unique(values: Any, what: str) -> None:
    seen: set[str] = set()
    for value in values:
        if not value:
            continue
        if value in seen:
            raise InconsistentDeploymentError(f"duplicated {what} {value!r}")
        seen.add(value)


def _check_rw_volumes(part: Partition) -> None:
    if not part.rw_volumes:
        return
    if part.file_system is not FileSystem.BTRFS:
        msg = (
            f"read-write volumes require a btrfs partition, "
            f"partition {part.label or part.role!s} uses {part.file_system}"
        )
        raise InconsistentDeploymentError(msg)
    for vol in part.rw_volumes:
        if not vol.path.startswith("/"):
            msg = f"read-write volume path {vol.path!r} is not absolute"
            raise InconsistentDeploymentError(msg)
    _check_unique((v.path for v in part.rw_volumes), "read-write volume")


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_RW_VOLUMES: tuple[tuple[str, bool, bool], ...] = (
    # (path, snapshotted, no_copy_on_write)
    ("/var", False, True),
    ("/root", False, False),
    ("/etc", True, False),
    ("/opt", False, False),
    ("/srv", False, False),
    ("/home", False, False),
)


def default_deployment() -> Deployment:
    """Deployment pre-populated with the standard disk, boot and snapshot layout."""
    system = Partition(
        label="SYSTEM",
        role=PartRole.SYSTEM,
        file_system=FileSystem.BTRFS,
        size=ALL_AVAILABLE_SIZE,
        mount_point="/",
        rw_volumes=[
            RWVolume(path=path, snapshotted=snap, no_copy_on_write=nocow)
            for path, snap, nocow in DEFAULT_RW_VOLUMES
        ],
    )
    return Deployment(
        disks=[
            Disk(
                partitions=[
                    Partition(
                        label="EFI",
                        role=PartRole.EFI,
                        file_system=FileSystem.VFAT,
                        size=1024,
                        mount_point="/boot/efi",
                    ),
                    Partition(
                        label="RECOVERY",
                        role=PartRole.RECOVERY,
                        file_system=FileSystem.BTRFS,
                        size=2048,
                    ),
                    system,
                ]
            )
        ],
        boot_config=BootConfig(bootloader=BOOTLOADER_GRUB),
        security=SecurityConfig(crypto_policy=CryptoPolicy.DEFAULT),
        snapshotter=SnapshotterConfig(name=SNAPSHOTTER_SNAPPER),
    )


def default_boot_entry(platform: Platform, device: str) -> EfiBootEntry:
    """The firmware boot entry pointing at the installed shim on *device*."""
    return EfiBootEntry(
        label="elemental-shim",
        loader=f"\\EFI\\ELEMENTAL\\shim{platform.efi_arch}.efi",
        disk=device,
    )


# ---------------------------------------------------------------------------
# Description files
# ---------------------------------------------------------------------------


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay *override* onto *base*; lists and scalars are replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def load_description(path: Path, deployment: Deployment) -> Deployment:
    """Read a YAML description file over *deployment* and return the result.

    Keys present in the file replace the corresponding values; nested
    mappings are merged key by key and lists are replaced wholesale. An
    empty file leaves *deployment* untouched.

    Raises:
        DescriptionError: the file cannot be read, is not YAML, or does not
            describe a valid deployment.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        raise DescriptionError(f"could not read description file '{path}': {exc}") from exc

    try:
        data = YAML(typ="safe").load(raw)
    except YAMLError as exc:
        raise DescriptionError(f"could not parse description file '{path}': {exc}") from exc

    if data is None:
        return deployment
    if not isinstance(data, dict):
        msg = f"could not unmarshal description file '{path}': expected a mapping"
        raise DescriptionError(msg)

    base = deployment.model_dump(by_alias=True, exclude_none=True)
    try:
        return Deployment.model_validate(_merge(base, data))
    except (ValidationError, SourceURIError) as exc:
        raise DescriptionError(f"could not unmarshal description file '{path}': {exc}") from exc
