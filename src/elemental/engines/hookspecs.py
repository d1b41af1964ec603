"""Pluggy hook specifications for engine providers.

Every hook is ``firstresult``: the first plugin returning a non-None engine
wins. Plugins registered later are called first (pluggy LIFO order), so a
directly registered plugin overrides entry-point plugins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from elemental.config.flags import BuildFlags, CustomizeFlags, InstallFlags
    from elemental.domain.deployment import Deployment
    from elemental.engines.contracts import Builder, Customizer, Installer, KernelModuleManager
    from elemental.infrastructure.system import System
    from elemental.infrastructure.workspace import Workspace
    from elemental.services.cancellation import CancelContext

hookspec = pluggy.HookspecMarker("elemental")
hookimpl = pluggy.HookimplMarker("elemental")


class EngineHookSpec:
    """Hook specifications for the elemental engine providers."""

    @hookspec(firstresult=True)
    def elemental_installer(
        self,
        ctx: CancelContext,
        system: System,
        deployment: Deployment,
        flags: InstallFlags,
    ) -> Installer | None:
        """Return an installer bound to *ctx* for *deployment*."""

    @hookspec(firstresult=True)
    def elemental_builder(
        self,
        ctx: CancelContext,
        system: System,
        flags: BuildFlags,
    ) -> Builder | None:
        """Return an image builder."""

    @hookspec(firstresult=True)
    def elemental_customizer(
        self,
        ctx: CancelContext,
        system: System,
        workspace: Workspace,
        flags: CustomizeFlags,
    ) -> Customizer | None:
        """Return an installer-media customizer working inside *workspace*."""

    @hookspec(firstresult=True)
    def elemental_kmod_manager(
        self, ctx: CancelContext, system: System
    ) -> KernelModuleManager | None:
        """Return the kernel module manager."""
