"""Command: build a raw disk image (deprecated, use customize)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from elemental.commands._base import ElementalCommand
from elemental.commands._options import given
from elemental.domain.image import BUILD_IMAGE_TYPES

if TYPE_CHECKING:
    from elemental.commands._context import AppContext


@click.command(
    cls=ElementalCommand,
    examples="""\
  elemental build --config-dir ./config
  elemental build --config-dir ./config --build-dir /var/tmp/build --platform linux/arm64
  elemental build --config-dir ./config -o disk.raw""",
)
@click.option("--config-dir", help="Configuration directory (default from settings).")
@click.option("--build-dir", help="Directory for build workspaces and images.")
@click.option(
    "--type",
    "image_type",
    type=click.Choice(sorted(t.value for t in BUILD_IMAGE_TYPES)),
    default="raw",
    show_default=True,
    help="Image type to build.",
)
@click.option("--platform", help="Target platform (os/arch[/variant]), host by default.")
@click.option("-o", "--output", "output_path", help="Output image path.")
@click.option("--local", is_flag=True, help="Resolve OCI images from the local store.")
@click.pass_obj
def build(
    app: AppContext,
    config_dir: str | None,
    build_dir: str | None,
    image_type: str,
    platform: str | None,
    output_path: str | None,
    local: bool,
) -> None:
    """Build a raw disk image from a configuration directory."""
    from elemental.config.flags import BuildFlags
    from elemental.services.build import BuildService

    flags = BuildFlags(
        **given(
            config_dir=config_dir,
            build_dir=build_dir,
            image_type=image_type,
            platform=platform,
            output_path=output_path,
            local=local,
        )
    )
    app.emit(BuildService(app.system, app.settings, app.engines).build(flags))
