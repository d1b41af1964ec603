"""Subcommand modules for elemental.

Provides register_commands(), which uses deferred imports to keep
``elemental --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every standalone command on the root CLI group."""
    from elemental.commands.build import build
    from elemental.commands.customize import customize
    from elemental.commands.install import install
    from elemental.commands.kmod import kmod
    from elemental.commands.reset import reset

    cli.add_command(install)
    cli.add_command(reset)
    cli.add_command(build)
    cli.add_command(customize)
    cli.add_command(kmod)
