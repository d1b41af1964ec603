"""ResetService: reinstall the disk the recovery system booted from.

Pipeline: RESOLVE (recovery only) → CANCEL SCOPE → INSTALLER → RESET
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from elemental.domain.errors import ElementalError
from elemental.services._helpers import deployment_summary
from elemental.services.base import BaseService
from elemental.services.cancellation import cancel_scope
from elemental.services.resolver import DeploymentResolver
from elemental.services.result import ServiceResult

if TYPE_CHECKING:
    from elemental.config.flags import InstallFlags
    from elemental.services.cancellation import CancelContext

logger = logging.getLogger(__name__)


class ResetService(BaseService):
    """Resets the system to the state described by the recovery medium."""

    def reset(self, flags: InstallFlags, ctx: CancelContext | None = None) -> ServiceResult:
        op = "reset"
        logger.info("Starting reset action")
        logger.debug("Reset action called with flags: %s", flags)

        resolver = DeploymentResolver(self._system, self._settings.live)
        try:
            deployment = resolver.resolve_reset(flags)
        except ElementalError as exc:
            logger.error("Failed to collect reset setup: %s", exc)
            return self._failure(op, exc, resolver.warnings)

        logger.info("Checked configuration, running reset process")
        with cancel_scope(ctx) as run_ctx:
            try:
                installer = self._engines.installer(run_ctx, self._system, deployment, flags)
            except ElementalError as exc:
                return self._failure(op, exc.with_stage("initiating installer"), resolver.warnings)
            try:
                installer.reset(deployment)
            except Exception as exc:
                logger.error("Reset failed: %s", exc)
                return self._engine_failure(op, "reset failed", exc, resolver.warnings)

        logger.info("System reset complete")
        return ServiceResult(
            ok=True,
            op=op,
            data=deployment_summary(deployment),
            warnings=resolver.warnings,
        )
