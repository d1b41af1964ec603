"""Root CLI group for elemental with global flags and command registration."""

from __future__ import annotations

import click

from elemental import __version__
from elemental.commands import register_commands
from elemental.commands._context import AppContext
from elemental.config.settings import ElementalSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="elemental")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option(
    "--log-file",
    default="",
    help="Log target: stdout, stderr or a file path (appended to).",
)
@click.option("--log-json", is_flag=True, help="Structured JSON log output.")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON result output.")
@click.option(
    "--settings",
    "settings_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Override settings file path.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    log_file: str,
    log_json: bool,
    json_output: bool,
    settings_path: str | None,
) -> None:
    """elemental: install, reset and build immutable OS deployments."""
    settings = ElementalSettings.from_cli(
        settings_path=settings_path,
        debug=debug,
        log_file=log_file,
        log_json=log_json,
        json_output=json_output,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
