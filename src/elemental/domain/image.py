"""Image definitions handed to the builder and customizer engines."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel

from elemental.domain.platform import Platform


class ImageType(StrEnum):
    RAW = "raw"
    ISO = "iso"


class CustomizeMode(StrEnum):
    EMBEDDED = "embedded"
    SPLIT = "split"


BUILD_IMAGE_TYPES = frozenset({ImageType.RAW})
CUSTOMIZE_MEDIA_TYPES = frozenset({ImageType.ISO, ImageType.RAW})


class ImageDefinition(BaseModel):
    """What to produce and from which configuration directory.

    Parsing the configuration directory itself (release manifests, helm
    values, overlays) belongs to the engine.
    """

    model_config = {"frozen": True}

    image_type: ImageType
    platform: Platform
    output_image: Path
    config_dir: Path
