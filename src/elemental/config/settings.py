"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: global CLI flags passed by Click
  2. Env vars: ``ELEMENTAL_*`` prefix (``ELEMENTAL_LIVE__MOUNT_POINT``)
  3. TOML file: ``--settings``, ``ELEMENTAL_CONFIG`` or
     ``/etc/elemental/config.toml``
  4. Code defaults: baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from elemental.config.discovery import find_config
from elemental.config.models import BuildConfig, LiveConfig, WorkspaceConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a TOML config file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class ElementalSettings(BaseSettings):
    """Settings for one CLI invocation, frozen after construction.

    Attributes:
        config_path: The TOML file that was loaded, if any.
        debug: DEBUG level for the ``elemental`` logger.
        log_file: ``stdout``, ``stderr``, ``-`` (unchanged) or a file path.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ELEMENTAL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- global CLI flags ---
    json_output: bool = False
    debug: bool = False
    log_json: bool = False
    log_file: str = ""

    # --- TOML sections ---
    live: LiveConfig = Field(default_factory=LiveConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        settings_path: str | None = None,
        **cli_flags: Any,
    ) -> ElementalSettings:
        """Construct settings from a CLI invocation.

        Discovers the TOML file (explicit *settings_path* first) and merges
        CLI flags as highest-priority overrides.
        """
        toml_path = find_config(settings_path)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
