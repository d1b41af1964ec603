"""AppContext, the shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Owns the System handle and the engine manager (both
created lazily) and centralizes result emission (stdout/stderr routing and
exit codes).
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING

import click

from elemental.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from elemental.config.settings import ElementalSettings
    from elemental.engines.manager import EngineManager
    from elemental.infrastructure.system import System
    from elemental.services.result import ServiceResult

logger = logging.getLogger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Engines are discovered on first use so ``--help`` and ``--version``
    never import plugin code.
    """

    def __init__(self, settings: ElementalSettings) -> None:
        self.settings = settings
        self._system: System | None = None
        self._engines: EngineManager | None = None

        from elemental.config.logging import configure_logging

        self._log_stream: IO[str] | None = configure_logging(
            debug=settings.debug,
            log_json=settings.log_json,
            log_file=settings.log_file,
        )
        if settings.config_path is not None:
            logger.debug("Loaded settings from %s", settings.config_path)

    @property
    def system(self) -> System:
        """The host system handle (created lazily on first access)."""
        if self._system is None:
            from elemental.infrastructure.system import System

            self._system = System()
        return self._system

    @property
    def engines(self) -> EngineManager:
        """The engine manager with entry-point plugins loaded."""
        if self._engines is None:
            from elemental.engines.manager import EngineManager

            self._engines = EngineManager()
            names = self._engines.discover_and_load()
            logger.debug("Loaded engine plugins: %s", ", ".join(names) or "none")
        return self._engines

    def close(self) -> None:
        """Close the log file opened for ``--log-file``, if any."""
        if self._log_stream is not None:
            for handler in logging.getLogger().handlers:
                handler.flush()
            self._log_stream.close()
            self._log_stream = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.debug,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
