"""structlog configuration for elemental.

Two output modes:
- Human (default): colored console output when the target is a TTY
- JSON (--log-json): structured JSON lines

Log target (``--log-file``): stderr by default; ``stdout``/``stderr`` select a
stream, ``-`` keeps the default and anything else is a file path, appended to.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

STREAM_TARGETS = ("", "-", "stdout", "stderr")


def _open_target(log_file: str) -> tuple[IO[str], bool]:
    """Return ``(stream, owned)``; owned streams must be closed by the caller."""
    if log_file == "stdout":
        return sys.stdout, False
    if log_file in STREAM_TARGETS:
        return sys.stderr, False
    try:
        return open(log_file, "a", encoding="utf-8"), True  # noqa: SIM115
    except OSError as exc:
        import click

        raise click.ClickException(f"opening log file '{log_file}': {exc}") from exc


def configure_logging(
    *,
    debug: bool = False,
    log_json: bool = False,
    log_file: str = "",
) -> IO[str] | None:
    """Configure structlog processors and output routing.

    Args:
        debug: Enable DEBUG-level output. When False, INFO and above.
        log_json: Use JSON renderer instead of console renderer.
        log_file: Log target, see module docstring.

    Returns:
        The opened log file when *log_file* is a path, otherwise None.
    """
    level = logging.DEBUG if debug else logging.INFO
    stream, owned = _open_target(log_file)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderers: list[structlog.types.Processor]
    if log_json:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        colors = not owned and stream.isatty()
        renderers = [structlog.dev.ConsoleRenderer(colors=colors)]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("elemental").setLevel(level)
    return stream if owned else None
