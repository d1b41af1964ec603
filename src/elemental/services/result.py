"""ServiceResult and ServiceError, the contract between actions and the CLI.

INVARIANT: Every action returns a ServiceResult. Errors raised below the
service layer are converted here and never escape to the command layer.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one action.

    Attributes:
        ok: Whether the action succeeded.
        op: Name of the action (``"install"``, ``"customize"``, ...).
        data: Action-specific payload on success.
        warnings: Non-fatal issues met while resolving or running.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
