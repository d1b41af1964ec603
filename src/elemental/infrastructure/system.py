"""System handle: the explicit dependency threaded through every action.

Bundles the filesystem root, the command runner and the host platform so
tests can point an action at a temporary tree with a fake runner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from elemental.domain.platform import Platform
from elemental.infrastructure.runner import Runner, run_cmd


@dataclass
class System:
    root: Path = Path("/")
    runner: Runner = run_cmd
    platform: Platform = field(default_factory=Platform.host)

    def path(self, value: str | Path) -> Path:
        """Map *value* into this system's filesystem.

        Absolute paths are re-rooted under :attr:`root`; relative paths are
        resolved against :attr:`root` unless the root is ``/``, in which case
        they stay relative to the working directory.
        """
        p = Path(value)
        if self.root == Path("/"):
            return p
        if p.is_absolute():
            return self.root.joinpath(*p.parts[1:])
        return self.root / p

    def exists(self, value: str | Path) -> bool:
        return self.path(value).exists()
