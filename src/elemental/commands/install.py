"""Command: install the OS onto a target disk."""

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
  elemental install --target /dev/sda --os-image registry.example.com/uc/os:6.2
  elemental install -d install.yaml --target /dev/vda
  elemental install -d install.yaml --snapshotter overwrite --crypto-policy fips
  elemental install --target /dev/nvme0n1 --cmdline "console=ttyS0" --create-boot-entry""",
)
@click.option("-t", "--target", help="Target disk device, e.g. /dev/sda.")
@deployment_options(create_boot_entry=False)
@click.pass_obj
def install(app: AppContext, **options: Any) -> None:
    """Install the OS onto the target disk."""
    from elemental.config.flags import InstallFlags
    from elemental.services.install import InstallService

    flags = InstallFlags(**given(**options))
    app.emit(InstallService(app.system, app.settings, app.engines).install(flags))
