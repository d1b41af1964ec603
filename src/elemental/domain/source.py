"""Image source references: where the OS image or overlay tree comes from.

A source is written as a URI. References without a scheme are OCI image
references (``registry.example.org/repo/image:tag``); local sources use the
``dir://``, ``raw://`` and ``tar://`` schemes.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, model_serializer, model_validator

from elemental.domain.errors import SourceURIError


class SourceType(StrEnum):
    OCI = "oci"
    DIR = "dir"
    RAW = "raw"
    TAR = "tar"


_SCHEME_SEPARATOR = "://"

# registry[:port]/path[:tag][@digest], loosely following the OCI reference grammar.
_OCI_REFERENCE = re.compile(
    r"^(?:[a-zA-Z0-9.-]+(?::[0-9]+)?/)?"
    r"[a-z0-9]+(?:[._-][a-z0-9]+)*(?:/[a-z0-9]+(?:[._-][a-z0-9]+)*)*"
    r"(?::[\w][\w.-]{0,127})?"
    r"(?:@[A-Za-z][A-Za-z0-9]*(?:[+.-][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,})?$"
)


class ImageSource(BaseModel):
    """Typed reference to an image source.

    Serializes to and from its URI form so description files can write
    ``sourceOS: registry.example.org/os:6.2``.
    """

    model_config = {"frozen": True}

    type: SourceType
    uri: str

    @classmethod
    def from_uri(cls, uri: str) -> ImageSource:
        """Parse *uri* into a typed source.

        Raises:
            SourceURIError: empty or malformed reference, or unsupported scheme.
        """
        value = uri.strip()
        if not value:
            raise SourceURIError("empty image source URI")

        if _SCHEME_SEPARATOR not in value:
            return cls._oci(value)

        scheme, _, ref = value.partition(_SCHEME_SEPARATOR)
        try:
            src_type = SourceType(scheme.lower())
        except ValueError:
            msg = f"image source type not supported: {scheme!r}"
            raise SourceURIError(msg) from None

        if not ref:
            raise SourceURIError(f"empty reference in image source URI {uri!r}")
        if src_type is SourceType.OCI:
            return cls._oci(ref)
        return cls(type=src_type, uri=ref)

    @classmethod
    def _oci(cls, ref: str) -> ImageSource:
        if not _OCI_REFERENCE.match(ref):
            raise SourceURIError(f"invalid OCI image reference {ref!r}")
        return cls(type=SourceType.OCI, uri=ref)

    @property
    def is_local(self) -> bool:
        return self.type is not SourceType.OCI

    def __str__(self) -> str:
        return f"{self.type}{_SCHEME_SEPARATOR}{self.uri}"

    @model_validator(mode="before")
    @classmethod
    def _parse_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            parsed = cls.from_uri(data)
            return {"type": parsed.type, "uri": parsed.uri}
        return data

    @model_serializer
    def _to_uri(self) -> str:
        return str(self)
