"""Engine contracts consumed by the actions.

Engines receive the derived cancellation context at construction time (or
per call for long-running runs) and are expected to observe it and unwind
cooperatively. Engines signal failure by raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from elemental.domain.deployment import Deployment
    from elemental.domain.image import ImageDefinition
    from elemental.infrastructure.workspace import Workspace
    from elemental.services.cancellation import CancelContext


@runtime_checkable
class Installer(Protocol):
    def install(self, deployment: Deployment) -> None: ...

    def reset(self, deployment: Deployment) -> None: ...


@runtime_checkable
class Builder(Protocol):
    def run(
        self, ctx: CancelContext, definition: ImageDefinition, workspace: Workspace
    ) -> None: ...


@runtime_checkable
class Customizer(Protocol):
    def run(
        self, ctx: CancelContext, definition: ImageDefinition, workspace: Workspace
    ) -> None: ...


@runtime_checkable
class KernelModuleManager(Protocol):
    def list_modules(self) -> list[str]: ...

    def reload(self, ctx: CancelContext, modules: list[str]) -> None: ...

    def unload(self, ctx: CancelContext, modules: list[str]) -> None: ...
