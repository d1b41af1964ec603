"""Deployment resolution for install and reset.

Pipeline (install): DEFAULTS → DESCRIPTION → FLAGS → SANITIZE
Pipeline (reset):   RECOVERY CHECK → DESCRIPTION → TARGET DISK → FLAGS → SANITIZE

Description sources, first match wins:
  1. ``--description`` flag
  2. the description shipped on the live medium (install: only when booted
     from live media and the file exists; reset: always required)

INVARIANT: A resolved deployment has passed sanitize() and is locked.
Empty flag values never override description values.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from elemental.domain.deployment import (
    BOOTLOADER_NONE,
    SNAPSHOTTER_OVERWRITE,
    BootConfig,
    Deployment,
    FileSystem,
    default_boot_entry,
    default_deployment,
    load_description,
)
from elemental.domain.errors import (
    ElementalError,
    InconsistentDeploymentError,
    PreconditionError,
    SourceURIError,
)
from elemental.domain.security import CryptoPolicy, append_fips_cmdline
from elemental.domain.source import ImageSource
from elemental.infrastructure.live import is_live_media, is_recovery, live_description
from elemental.services.target import resolve_reset_target

if TYPE_CHECKING:
    from elemental.config.flags import InstallFlags
    from elemental.config.models import LiveConfig
    from elemental.infrastructure.system import System

logger = logging.getLogger(__name__)

OVERWRITE_WARNING = (
    "'overwrite' snapshotter is a debugging tool and should not be used for "
    "production installation"
)


class DeploymentResolver:
    """Turns defaults, description files and flags into one deployment.

    Non-fatal adjustments are logged and collected in :attr:`warnings`.
    """

    def __init__(self, system: System, live: LiveConfig) -> None:
        self._system = system
        self._live = live
        self.warnings: list[str] = []

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def resolve_install(self, flags: InstallFlags) -> Deployment:
        """Resolve the deployment for a fresh installation.

        Raises:
            DescriptionError: the description file cannot be loaded.
            ElementalError: flag overlay or sanitization failed; the message
                is prefixed with ``defining the deployment details``.
        """
        deployment = default_deployment()
        if flags.description:
            deployment = self._load(flags.description, deployment)
        elif is_live_media(self._system, self._live):
            path = live_description(self._system, self._live)
            if path is not None:
                deployment = self._load(path, deployment)

        try:
            self.apply_install_flags(deployment, flags)
        except ElementalError as exc:
            raise exc.with_stage("defining the deployment details") from exc
        return deployment

    def resolve_reset(self, flags: InstallFlags, *, attempts: int = 1) -> Deployment:
        """Resolve the deployment for resetting the disk we booted from.

        Raises:
            PreconditionError: not running from the recovery system.
            DescriptionError: the description file cannot be loaded.
            TargetResolutionError: the target disk cannot be determined.
            ElementalError: flag overlay or sanitization failed.
        """
        if not is_recovery(self._system, self._live):
            raise PreconditionError("reset command requires booting from recovery system")

        # The description is the sole source of the layout: no defaults.
        deployment = self._load(flags.description or self._live.description_path, Deployment())

        try:
            resolve_reset_target(
                self._system, deployment, self._live.mount_point, attempts=attempts
            )
        except ElementalError as exc:
            raise exc.with_stage("failed to define target disk") from exc

        try:
            self.apply_install_flags(deployment, flags)
        except ElementalError as exc:
            raise exc.with_stage("defining the deployment details") from exc
        return deployment

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _load(self, path: str, deployment: Deployment) -> Deployment:
        loaded = load_description(self._system.path(path), deployment)
        logger.info("Loaded deployment description %s", path)
        return loaded

    def apply_install_flags(self, deployment: Deployment, flags: InstallFlags) -> None:
        """Overlay non-empty *flags* onto *deployment*, then sanitize it.

        Raises:
            SourceURIError: an image URI flag cannot be parsed.
            InconsistentDeploymentError: sanitization failed.
        """
        disk = deployment.get_system_disk()
        if flags.target and disk is not None:
            disk.device = flags.target

        if flags.os_image:
            deployment.source_os = self._parse_source(flags.os_image, "OS")
        if flags.overlay:
            deployment.overlay_tree = self._parse_source(flags.overlay, "overlay")
        if flags.config_script:
            deployment.cfg_script = flags.config_script

        if flags.crypto_policy:
            if CryptoPolicy.is_valid(flags.crypto_policy):
                deployment.security.crypto_policy = CryptoPolicy(flags.crypto_policy)
            else:
                self._warn(f"ignoring invalid crypto policy {flags.crypto_policy!r}")

        self.set_bootloader(deployment, flags)

        if flags.snapshotter:
            deployment.snapshotter.name = flags.snapshotter
            if flags.snapshotter == SNAPSHOTTER_OVERWRITE:
                self._use_overwrite_snapshotter(deployment)

        try:
            deployment.sanitize()
        except InconsistentDeploymentError as exc:
            raise exc.with_stage("inconsistent deployment setup found") from exc

    def set_bootloader(self, deployment: Deployment, flags: InstallFlags) -> None:
        """Apply boot entry, bootloader and kernel command line flags.

        A bootloader of ``none`` keeps whatever the deployment already has.
        FIPS deployments get the FIPS boot parameters appended.
        """
        disk = deployment.get_system_disk()
        if flags.create_boot_entry and disk is not None:
            entry = default_boot_entry(self._system.platform, disk.device)
            deployment.firmware.boot_entries = [entry]

        if deployment.boot_config is None:
            deployment.boot_config = BootConfig()
        boot = deployment.boot_config
        if flags.bootloader and flags.bootloader != BOOTLOADER_NONE:
            boot.bootloader = flags.bootloader
        if flags.kernel_cmdline:
            boot.kernel_cmdline = flags.kernel_cmdline
        if deployment.is_fips_enabled():
            boot.kernel_cmdline = append_fips_cmdline(boot.kernel_cmdline)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_source(uri: str, what: str) -> ImageSource:
        try:
            return ImageSource.from_uri(uri)
        except SourceURIError as exc:
            raise exc.with_stage(f"failed parsing {what} source URI ({uri!r})") from exc

    def _use_overwrite_snapshotter(self, deployment: Deployment) -> None:
        self._warn(OVERWRITE_WARNING)
        # Without snapshots the system partition needs neither btrfs nor
        # subvolumes.
        part = deployment.get_system_partition()
        if part is None:
            return
        if part.rw_volumes:
            self._warn(
                "overwrite snapshotter selected, dropping "
                f"{len(part.rw_volumes)} read-write volumes from partition {part.label}"
            )
        part.file_system = FileSystem.EXT4
        part.rw_volumes = []

    def _warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)
