"""Command: customize installer media."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from elemental.commands._base import ElementalCommand
from elemental.commands._options import given
from elemental.domain.image import CUSTOMIZE_MEDIA_TYPES, CustomizeMode

if TYPE_CHECKING:
    from elemental.commands._context import AppContext


@click.command(
    cls=ElementalCommand,
    examples="""\
  elemental customize --config-dir ./config
  elemental customize --config-dir ./config --type raw -o installer.raw
  elemental customize --config-dir ./config --mode split""",
)
@click.option(
    "--type",
    "media_type",
    type=click.Choice(sorted(t.value for t in CUSTOMIZE_MEDIA_TYPES)),
    default="iso",
    show_default=True,
    help="Installer media type.",
)
@click.option("--config-dir", help="Configuration directory (default from settings).")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in CustomizeMode]),
    default="embedded",
    show_default=True,
    help="Embed the configuration in the media or write it next to the image.",
)
@click.option("-o", "--output", "output_path", help="Output image path.")
@click.option("--platform", help="Target platform (os/arch[/variant]), host by default.")
@click.option("--local", is_flag=True, help="Resolve OCI images from the local store.")
@click.pass_obj
def customize(
    app: AppContext,
    media_type: str,
    config_dir: str | None,
    mode: str,
    output_path: str | None,
    platform: str | None,
    local: bool,
) -> None:
    """Customize installer media from a configuration directory."""
    from elemental.config.flags import CustomizeFlags
    from elemental.services.customize import CustomizeService

    flags = CustomizeFlags(
        **given(
            media_type=media_type,
            config_dir=config_dir,
            mode=mode,
            output_path=output_path,
            platform=platform,
            local=local,
        )
    )
    app.emit(CustomizeService(app.system, app.settings, app.engines).customize(flags))
