"""Target platform parsing (``os/arch[/variant]``)."""

from __future__ import annotations

import platform as _host

from pydantic import BaseModel

from elemental.domain.errors import PlatformError

SUPPORTED_OS = frozenset({"linux"})

# Accepted spellings mapped to canonical OCI architecture names.
_ARCH_ALIASES: dict[str, str] = {
    "amd64": "amd64",
    "x86_64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

# EFI removable-media file suffixes per architecture.
_EFI_ARCH: dict[str, str] = {
    "amd64": "x64",
    "arm64": "aa64",
}


class Platform(BaseModel):
    """A parsed target platform."""

    model_config = {"frozen": True}

    os: str
    arch: str
    variant: str = ""

    @classmethod
    def parse(cls, value: str) -> Platform:
        """Parse ``os/arch`` or ``os/arch/variant``.

        Raises:
            PlatformError: malformed string, unsupported OS or architecture.
        """
        parts = value.strip().split("/")
        if len(parts) not in (2, 3) or not all(parts):
            raise PlatformError(f"malformed platform {value!r}")

        os_name = parts[0].lower()
        if os_name not in SUPPORTED_OS:
            raise PlatformError(f"unsupported platform OS {parts[0]!r} in {value!r}")

        arch = _ARCH_ALIASES.get(parts[1].lower())
        if arch is None:
            raise PlatformError(f"unsupported platform architecture {parts[1]!r} in {value!r}")

        variant = parts[2] if len(parts) == 3 else ""
        return cls(os=os_name, arch=arch, variant=variant)

    @classmethod
    def host(cls) -> Platform:
        """The platform of the running machine (falls back to amd64)."""
        arch = _ARCH_ALIASES.get(_host.machine().lower(), "amd64")
        return cls(os="linux", arch=arch)

    @property
    def efi_arch(self) -> str:
        return _EFI_ARCH[self.arch]

    def __str__(self) -> str:
        if self.variant:
            return f"{self.os}/{self.arch}/{self.variant}"
        return f"{self.os}/{self.arch}"


def default_platform() -> str:
    """Default ``--platform`` value: ``linux/<host arch>``."""
    return str(Platform.host())
