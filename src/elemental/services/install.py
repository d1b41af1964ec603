"""InstallService: resolve a deployment and hand it to the installer engine.

Pipeline: RESOLVE → CANCEL SCOPE → INSTALLER → INSTALL
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


class InstallService(BaseService):
    """Installs the OS onto the target disk."""

    def install(self, flags: InstallFlags, ctx: CancelContext | None = None) -> ServiceResult:
        op = "install"
        logger.info("Starting install action")
        logger.debug("Install action called with flags: %s", flags)

        resolver = DeploymentResolver(self._system, self._settings.live)
        try:
            deployment = resolver.resolve_install(flags)
        except ElementalError as exc:
            logger.error("Failed to collect installation setup: %s", exc)
            return self._failure(op, exc, resolver.warnings)

        logger.info("Checked configuration, running installation process")
        with cancel_scope(ctx) as run_ctx:
            try:
                installer = self._engines.installer(run_ctx, self._system, deployment, flags)
            except ElementalError as exc:
                return self._failure(op, exc.with_stage("initiating installer"), resolver.warnings)
            try:
                installer.install(deployment)
            except Exception as exc:
                logger.error("Installation failed: %s", exc)
                return self._engine_failure(op, "installation failed", exc, resolver.warnings)

        logger.info("Installation complete")
        return ServiceResult(
            ok=True,
            op=op,
            data=deployment_summary(deployment),
            warnings=resolver.warnings,
        )
