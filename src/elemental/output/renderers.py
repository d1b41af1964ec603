"""Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Results are
rendered as a status line followed by indented ``key: value`` fields;
list values become one indented line per item.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.text import Text

from elemental.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from elemental.services.result import ServiceResult

_PATH_KEYS = frozenset({"image", "config_dir", "build_dir", "target"})


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        _render_ok(result, console)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def _render_ok(result: ServiceResult, console: Console) -> None:
    console.print(Text("OK", style="elemental.ok"), Text(f"  {result.op}", style="elemental.op"))
    for key, value in result.data.items():
        if value in (None, "", []):
            continue
        _field(console, key, value)


def _field(console: Console, key: str, value: Any) -> None:
    label = Text(f"  {key}: ", style="elemental.key")
    if isinstance(value, list):
        console.print(label)
        for item in value:
            console.print(Text(f"    - {item}"))
        return
    style = "elemental.path" if key in _PATH_KEYS else ""
    console.print(label, Text(str(value), style=style), sep="")


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="elemental.error"),
        Text(f"  {result.op}", style="elemental.op"),
        Text(" - "),
        Text(msg),
        sep="",
    )
    if verbose and err is not None:
        code = Text(err.code, style="elemental.code")
        console.print(Text("  code: ", style="elemental.key"), code, sep="")
        for key, value in err.detail.items():
            _field(console, key, value)
