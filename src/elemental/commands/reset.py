"""Command: reset the system from the recovery medium."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from elemental.commands._base import ElementalCommand
from elemental.commands._options import deployment_options, given

if TYPE_CHECKING:
    from elemental.commands._context import AppContext


@click.command(
    cls=ElementalCommand,
    examples="""\
  elemental reset
  elemental reset -d /run/initramfs/live/install/install.yaml
  elemental reset --os-image registry.example.com/uc/os:6.2 --no-verify""",
)
@deployment_options(create_boot_entry=True)
@click.pass_obj
def reset(app: AppContext, **options: Any) -> None:
    """Reset the disk the recovery system booted from.

    The target disk is the one holding the live partition; it cannot be
    chosen on the command line.
    """
    from elemental.config.flags import InstallFlags
    from elemental.services.reset import ResetService

    flags = InstallFlags(**given(**options))
    app.emit(ResetService(app.system, app.settings, app.engines).reset(flags))
