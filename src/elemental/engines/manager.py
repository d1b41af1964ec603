"""Engine discovery and lookup.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints
in the ``elemental.engines`` group, plus plugins registered directly.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

import pluggy

from elemental.domain.errors import EngineUnavailableError
from elemental.engines.hookspecs import EngineHookSpec

if TYPE_CHECKING:
    from elemental.config.flags import BuildFlags, CustomizeFlags, InstallFlags
    from elemental.domain.deployment import Deployment
    from elemental.engines.contracts import Builder, Customizer, Installer, KernelModuleManager
    from elemental.infrastructure.system import System
    from elemental.infrastructure.workspace import Workspace
    from elemental.services.cancellation import CancelContext

PROJECT_NAME = "elemental"
ENTRY_POINT_GROUP = "elemental.engines"

logger = logging.getLogger(__name__)


class EngineManager:
    """Discovers engine plugins and hands out engine instances."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(EngineHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Load engine plugins from entry points; returns registered names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered engine plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Engine lookup
    # ------------------------------------------------------------------

    def installer(
        self,
        ctx: CancelContext,
        system: System,
        deployment: Deployment,
        flags: InstallFlags,
    ) -> Installer:
        engine = self._pm.hook.elemental_installer(
            ctx=ctx, system=system, deployment=deployment, flags=flags
        )
        return self._require(engine, "installer")

    def builder(self, ctx: CancelContext, system: System, flags: BuildFlags) -> Builder:
        engine = self._pm.hook.elemental_builder(ctx=ctx, system=system, flags=flags)
        return self._require(engine, "builder")

    def customizer(
        self,
        ctx: CancelContext,
        system: System,
        workspace: Workspace,
        flags: CustomizeFlags,
    ) -> Customizer:
        engine = self._pm.hook.elemental_customizer(
            ctx=ctx, system=system, workspace=workspace, flags=flags
        )
        return self._require(engine, "customizer")

    def kmod_manager(self, ctx: CancelContext, system: System) -> KernelModuleManager:
        engine = self._pm.hook.elemental_kmod_manager(ctx=ctx, system=system)
        return self._require(engine, "kernel module")

    @staticmethod
    def _require(engine: Any, kind: str) -> Any:
        if engine is None:
            raise EngineUnavailableError(kind)
        logger.debug("Using %s engine %s", kind, type(engine).__name__)
        return engine

    # ------------------------------------------------------------------
    # Entry-point normalization
    # ------------------------------------------------------------------

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate engine plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated engine plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("elemental")`` sets an ``elemental_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "elemental_impl", None):
                return True
        return False
