"""Live medium detection.

The system runs from install or recovery media when the live squashfs image
is present. A recovery boot additionally carries the recovery mark on the
kernel command line.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from elemental.config.models import LiveConfig
    from elemental.infrastructure.system import System

logger = logging.getLogger(__name__)


def is_live_media(system: System, live: LiveConfig) -> bool:
    """Whether the system is booted from install or recovery media."""
    return system.exists(live.squashfs_path)


def is_recovery(system: System, live: LiveConfig) -> bool:
    """Whether the system is booted into the recovery system."""
    if not is_live_media(system, live):
        return False
    try:
        cmdline = system.path(live.cmdline_path).read_text(encoding="utf-8")
    except OSError:
        logger.debug("Could not read %s", live.cmdline_path, exc_info=True)
        return False
    return live.recovery_mark in cmdline.split()


def live_description(system: System, live: LiveConfig) -> str | None:
    """Path of the description file shipped on the live medium, if present."""
    if system.exists(live.description_path):
        return live.description_path
    return None
