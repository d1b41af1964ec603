"""Config file discovery.

Lookup order: ``--settings`` CLI flag, ``ELEMENTAL_CONFIG`` env var, then
the system-wide ``/etc/elemental/config.toml``.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_ENV_VAR = "ELEMENTAL_CONFIG"
SYSTEM_CONFIG = Path("/etc/elemental/config.toml")


def find_config(explicit: str | None = None, *, system_config: Path = SYSTEM_CONFIG) -> Path | None:
    """Return the config file to load, or None if none exists.

    An explicit path or ``ELEMENTAL_CONFIG`` that does not point at a file
    yields None rather than falling through to the system-wide file.
    """
    candidate = explicit or os.environ.get(CONFIG_ENV_VAR)
    if candidate:
        p = Path(candidate)
        return p if p.is_file() else None

    if system_config.is_file():
        return system_config
    return None
