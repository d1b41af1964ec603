"""External command execution with consistent logging."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from elemental.domain.errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


class Runner(Protocol):
    """Callable that runs a command; swapped for fakes in tests."""

    def __call__(self, argv: Sequence[str], *, check: bool = True) -> CmdResult: ...


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
) -> CmdResult:
    """Run *argv*, capturing output.

    Raises:
        CommandError: the command is missing, or exits non-zero with *check*.
    """
    argv_list = list(argv)
    logger.debug("Running command: %s", _fmt_argv(argv_list))

    try:
        p = subprocess.run(
            argv_list,
            text=True,
            capture_output=True,
            env=dict(os.environ, **(env or {})),
        )
    except OSError as exc:
        raise CommandError(argv_list, 127, str(exc)) from exc

    if p.stderr:
        logger.debug("stderr: %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(argv_list, p.returncode, p.stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
