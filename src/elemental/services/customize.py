"""CustomizeService: produce installer media from a configuration directory.

Pipeline: VALIDATE → OUTPUT PATHS → WORKSPACE → ISO STORE → CANCEL SCOPE →
CUSTOMIZER → CLEANUP

In ``split`` mode the configuration is written to ``<image-stem>-config``
next to the image instead of being embedded; that directory is part of the
output and survives workspace cleanup.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from elemental.domain.errors import ConfigurationError, ElementalError, PlatformError
from elemental.domain.image import CUSTOMIZE_MEDIA_TYPES, CustomizeMode, ImageDefinition, ImageType
from elemental.domain.platform import Platform, default_platform
from elemental.infrastructure.workspace import default_image_path, open_workspace, split_config_dir
from elemental.services.base import BaseService
from elemental.services.cancellation import cancel_scope
from elemental.services.result import ServiceResult

if TYPE_CHECKING:
    from elemental.config.flags import CustomizeFlags
    from elemental.services.cancellation import CancelContext

logger = logging.getLogger(__name__)


class CustomizeService(BaseService):
    """Customizes installer media in a temporary workspace."""

    def customize(self, flags: CustomizeFlags, ctx: CancelContext | None = None) -> ServiceResult:
        op = "customize"
        logger.info("Customizing image started")

        try:
            definition, split_dir = self._define(flags)
        except ElementalError as exc:
            logger.error("Digesting image definition from customize flags failed: %s", exc)
            return self._failure(op, exc)

        work_dir = self._settings.workspace.work_dir
        try:
            with (
                open_workspace(
                    None,
                    split_dir,
                    work_dir=self._system.path(work_dir) if work_dir else None,
                ) as workspace,
                cancel_scope(ctx) as run_ctx,
            ):
                try:
                    workspace.ensure_iso_store()
                except ElementalError as exc:
                    return self._failure(op, exc.with_stage("setting up file extractor"))
                try:
                    customizer = self._engines.customizer(run_ctx, self._system, workspace, flags)
                    customizer.run(run_ctx, definition, workspace)
                except Exception as exc:
                    logger.error("Customizing installer media failed: %s", exc)
                    return self._engine_failure(op, "customizing installer media failed", exc)
        except ElementalError as exc:
            logger.error("Creating working directory failed: %s", exc)
            return self._failure(op, exc)

        logger.info("Customizing image complete")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "image": str(definition.output_image),
                "media_type": str(definition.image_type),
                "platform": str(definition.platform),
                "mode": flags.mode,
                "config_dir": str(split_dir) if split_dir else None,
            },
        )

    def resolve_output_paths(
        self, flags: CustomizeFlags, media_type: ImageType
    ) -> tuple[Path, Path | None]:
        """Return the image path and, in split mode, the external config dir."""
        if flags.output_path:
            image = self._system.path(flags.output_path)
        else:
            image = default_image_path(self._config_dir(flags), media_type)
        split_dir = split_config_dir(image) if flags.mode == CustomizeMode.SPLIT else None
        return image, split_dir

    def _config_dir(self, flags: CustomizeFlags) -> Path:
        return self._system.path(flags.config_dir or self._settings.build.config_dir)

    def _define(self, flags: CustomizeFlags) -> tuple[ImageDefinition, Path | None]:
        try:
            CustomizeMode(flags.mode)
        except ValueError:
            raise ConfigurationError(f"unsupported customize mode {flags.mode!r}") from None
        if flags.media_type not in CUSTOMIZE_MEDIA_TYPES:
            raise ConfigurationError(f"media type {flags.media_type!r} not supported")
        media_type = ImageType(flags.media_type)

        config_dir = self._config_dir(flags)
        if not config_dir.is_dir():
            shown = flags.config_dir or self._settings.build.config_dir
            raise ConfigurationError(f"reading config directory {shown}: not a directory")

        platform_flag = flags.platform or default_platform()
        try:
            platform = Platform.parse(platform_flag)
        except PlatformError as exc:
            raise exc.with_stage(f"error parsing platform {platform_flag}") from exc

        image, split_dir = self.resolve_output_paths(flags, media_type)
        definition = ImageDefinition(
            image_type=media_type,
            platform=platform,
            output_image=image,
            config_dir=config_dir,
        )
        return definition, split_dir
