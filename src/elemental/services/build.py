"""BuildService: produce a raw disk image from a configuration directory.

Deprecated in favour of customize, kept for existing pipelines.

Pipeline: VALIDATE → DEFINE → WORKSPACE → CANCEL SCOPE → BUILDER → CLEANUP
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from elemental.domain.errors import ConfigurationError, ElementalError, PlatformError
from elemental.domain.image import BUILD_IMAGE_TYPES, ImageDefinition, ImageType
from elemental.domain.platform import Platform, default_platform
from elemental.infrastructure.workspace import build_root, default_image_path, open_workspace
from elemental.services.base import BaseService
from elemental.services.cancellation import cancel_scope
from elemental.services.result import ServiceResult

if TYPE_CHECKING:
    from elemental.config.flags import BuildFlags
    from elemental.services.cancellation import CancelContext

logger = logging.getLogger(__name__)

DEPRECATION_WARNING = "build is deprecated, switch to customize going forward"


class BuildService(BaseService):
    """Builds raw images inside a timestamped build directory."""

    def build(self, flags: BuildFlags, ctx: CancelContext | None = None) -> ServiceResult:
        op = "build"
        warnings = [DEPRECATION_WARNING]
        logger.warning("Warning: %s", DEPRECATION_WARNING)

        try:
            definition = self._define(flags)
        except ElementalError as exc:
            logger.error("Input args are invalid: %s", exc)
            return self._failure(op, exc, warnings)
        logger.info("Validated image configuration")

        root = build_root(self._build_dir(flags))
        try:
            with open_workspace(root) as workspace, cancel_scope(ctx) as run_ctx:
                try:
                    builder = self._engines.builder(run_ctx, self._system, flags)
                    logger.info(
                        "Starting build process for %s %s image",
                        definition.platform,
                        definition.image_type,
                    )
                    builder.run(run_ctx, definition, workspace)
                except Exception as exc:
                    logger.error("Build process failed: %s", exc)
                    return self._engine_failure(op, "build process failed", exc, warnings)
        except ElementalError as exc:
            logger.error("Creating build directory failed: %s", exc)
            return self._failure(op, exc, warnings)

        logger.info("Build process complete")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "image": str(definition.output_image),
                "image_type": str(definition.image_type),
                "platform": str(definition.platform),
                "build_dir": str(root),
            },
            warnings=warnings,
        )

    def _build_dir(self, flags: BuildFlags) -> Path:
        return self._system.path(flags.build_dir or self._settings.build.build_dir)

    def _define(self, flags: BuildFlags) -> ImageDefinition:
        """Validate the flags and derive the image definition.

        Raises:
            ConfigurationError: missing config directory or unsupported type.
            PlatformError: the platform cannot be parsed.
        """
        config_dir_flag = flags.config_dir or self._settings.build.config_dir
        config_dir = self._system.path(config_dir_flag)
        if not config_dir.is_dir():
            raise ConfigurationError(f"reading config directory {config_dir_flag}: not a directory")

        if flags.image_type not in BUILD_IMAGE_TYPES:
            raise ConfigurationError(f"image type {flags.image_type!r} not supported")
        image_type = ImageType(flags.image_type)

        platform_flag = flags.platform or default_platform()
        try:
            platform = Platform.parse(platform_flag)
        except PlatformError as exc:
            raise exc.with_stage(f"error parsing platform {platform_flag}") from exc

        if flags.output_path:
            output = self._system.path(flags.output_path)
        else:
            output = default_image_path(self._build_dir(flags), image_type)

        return ImageDefinition(
            image_type=image_type,
            platform=platform,
            output_image=output,
            config_dir=config_dir,
        )
