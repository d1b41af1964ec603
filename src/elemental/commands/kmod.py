"""Command: unload or reload extension kernel modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from elemental.commands._base import ElementalCommand

if TYPE_CHECKING:
    from elemental.commands._context import AppContext


@click.command(
    cls=ElementalCommand,
    examples="""\
  elemental kmod --unload
  elemental kmod --reload""",
)
@click.option("--reload", is_flag=True, help="Reload the extension kernel modules.")
@click.option("--unload", is_flag=True, help="Unload the extension kernel modules.")
@click.pass_obj
def kmod(app: AppContext, reload: bool, unload: bool) -> None:
    """Unload or reload kernel modules shipped by system extensions."""
    if reload == unload:
        raise click.UsageError("exactly one of --reload or --unload must be specified")

    from elemental.config.flags import KmodFlags
    from elemental.services.kmod import KmodService

    flags = KmodFlags(reload=reload, unload=unload)
    app.emit(KmodService(app.system, app.settings, app.engines).manage(flags))
