"""KmodService: unload or reload the kernel modules shipped by extensions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from elemental.domain.errors import ConfigurationError, ElementalError
from elemental.services.base import BaseService
from elemental.services.cancellation import cancel_scope
from elemental.services.result import ServiceResult

if TYPE_CHECKING:
    from elemental.config.flags import KmodFlags
    from elemental.services.cancellation import CancelContext

logger = logging.getLogger(__name__)


class KmodService(BaseService):
    def manage(self, flags: KmodFlags, ctx: CancelContext | None = None) -> ServiceResult:
        """Apply exactly one of unload or reload to the listed modules.

        An empty module list is a successful no-op.
        """
        op = "kmod"
        if flags.reload == flags.unload:
            exc = ConfigurationError("exactly one of --reload or --unload must be specified")
            return self._failure(op, exc)
        action = "reload" if flags.reload else "unload"

        with cancel_scope(ctx) as run_ctx:
            try:
                manager = self._engines.kmod_manager(run_ctx, self._system)
            except ElementalError as exc:
                return self._failure(op, exc.with_stage("initiating kernel module manager"))
            try:
                modules = list(manager.list_modules())
            except Exception as exc:
                return self._engine_failure(op, "listing kernel modules", exc)

            if not modules:
                logger.info("No extension kernel modules found, nothing to %s", action)
                return ServiceResult(
                    ok=True,
                    op=op,
                    data={"action": action, "modules": [], "skipped": True},
                )

            logger.info("Running %s for kernel modules: %s", action, ", ".join(modules))
            try:
                if flags.unload:
                    manager.unload(run_ctx, modules)
                else:
                    manager.reload(run_ctx, modules)
            except Exception as exc:
                return self._engine_failure(op, f"{action} of kernel modules failed", exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={"action": action, "modules": modules, "skipped": False},
        )
