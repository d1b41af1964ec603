"""BaseService, the foundation for all elemental actions.

Every service receives the :class:`System` handle, the invocation settings
and the engine manager at construction time. Nothing is looked up from
process-wide state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from elemental.domain.errors import ElementalError
from elemental.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from elemental.config.settings import ElementalSettings
    from elemental.engines.manager import EngineManager
    from elemental.infrastructure.system import System

logger = logging.getLogger(__name__)

ENGINE_FAILED = "ENGINE_FAILED"


class BaseService:
    """Abstract base for the action services.

    Usage::

        class InstallService(BaseService):
            def install(self, flags: InstallFlags) -> ServiceResult:
                ...
    """

    def __init__(
        self,
        system: System,
        settings: ElementalSettings,
        engines: EngineManager,
    ) -> None:
        self._system = system
        self._settings = settings
        self._engines = engines

    @staticmethod
    def _failure(op: str, exc: ElementalError, warnings: Sequence[str] = ()) -> ServiceResult:
        """Convert a resolution or setup error into a failed result."""
        return ServiceResult(
            ok=False,
            op=op,
            warnings=list(warnings),
            error=ServiceError(code=exc.code, message=str(exc)),
        )

    @staticmethod
    def _engine_failure(
        op: str,
        stage: str,
        exc: Exception,
        warnings: Sequence[str] = (),
    ) -> ServiceResult:
        """Convert an error raised by an execution engine into a failed result.

        Engines may raise anything. Elemental errors keep their code, any
        other exception is reported as ``ENGINE_FAILED``.
        """
        logger.debug("%s: %s", stage, exc, exc_info=True)
        code = exc.code if isinstance(exc, ElementalError) else ENGINE_FAILED
        detail = {"exception": type(exc).__name__}
        return ServiceResult(
            ok=False,
            op=op,
            warnings=list(warnings),
            error=ServiceError(code=code, message=f"{stage}: {exc}", detail=detail),
        )
