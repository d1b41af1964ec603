"""Error hierarchy for resolution, workspace and engine failures.

Every error carries a machine-readable ``code`` that services copy into
:class:`~elemental.services.result.ServiceError`.

Exception Hierarchy:
    ElementalError (base)
        ├── ConfigurationError
        │   ├── DescriptionError
        │   ├── SourceURIError
        │   └── PlatformError
        ├── PreconditionError
        │   └── TargetResolutionError
        ├── InconsistentDeploymentError
        ├── FrozenDeploymentError
        ├── WorkspaceError
        ├── OperationCancelledError
        ├── EngineUnavailableError
        ├── BlockDeviceError
        └── CommandError

Stage boundaries re-raise with ``raise exc.with_stage("<stage>") from exc``
so the final message traces the failing stage and keeps the original code.
"""

from __future__ import annotations

from collections.abc import Sequence


class ElementalError(Exception):
    """Base exception for all orchestration failures."""

    code = "ELEMENTAL_ERROR"

    def with_stage(self, stage: str) -> ElementalError:
        """Copy of this error, same type and attributes, message prefixed by *stage*."""
        err = self.__class__.__new__(self.__class__)
        err.__dict__.update(self.__dict__)
        err.args = (f"{stage}: {self}",)
        return err


class ConfigurationError(ElementalError):
    """Invalid user input: config directory, image type, mode, flags."""

    code = "INVALID_CONFIGURATION"


class DescriptionError(ConfigurationError):
    """A deployment description file could not be read or parsed."""

    code = "INVALID_DESCRIPTION"


class SourceURIError(ConfigurationError):
    """An image source URI is malformed or uses an unsupported scheme."""

    code = "INVALID_SOURCE"


class PlatformError(ConfigurationError):
    """A platform string could not be parsed or is not supported."""

    code = "INVALID_PLATFORM"


class PreconditionError(ElementalError):
    """The running environment does not allow the requested action."""

    code = "PRECONDITION_FAILED"


class TargetResolutionError(PreconditionError):
    """The reset target disk could not be determined."""

    code = "TARGET_NOT_FOUND"


class InconsistentDeploymentError(ElementalError):
    """Cross-field validation of a deployment failed."""

    code = "INCONSISTENT_DEPLOYMENT"


class FrozenDeploymentError(ElementalError):
    """Attempt to modify a deployment after sanitization locked it."""

    code = "FROZEN_DEPLOYMENT"


class WorkspaceError(ElementalError):
    """The working directory could not be created."""

    code = "WORKSPACE_FAILED"


class OperationCancelledError(ElementalError):
    """An engine observed cancellation and stopped early."""

    code = "CANCELLED"


class EngineUnavailableError(ElementalError):
    """No plugin provides the requested execution engine."""

    code = "ENGINE_UNAVAILABLE"

    def __init__(self, engine: str) -> None:
        self.engine = engine
        super().__init__(f"no {engine} engine available")


class BlockDeviceError(ElementalError):
    """Block device enumeration failed or returned unexpected data."""

    code = "BLOCK_DEVICE_ERROR"


class CommandError(ElementalError):
    """An external command exited with a non-zero status."""

    code = "COMMAND_FAILED"

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"command failed ({returncode}): {' '.join(self.argv)}"
        if stderr:
            msg += f": {stderr.strip()}"
        super().__init__(msg)
