"""Output mode selection for ServiceResult.

``--json`` gives the serialized result for machines, otherwise the Rich
renderers produce human-readable text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from elemental.services.result import ServiceResult


class OutputSettings(BaseModel):
    model_config = {"frozen": True}

    json_output: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    from elemental.output.renderers import render_result

    return render_result(result, verbose=settings.verbose)
