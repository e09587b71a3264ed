# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models describing a BitBake build environment."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BUILD_CONFIGURATION: Final[str] = "No BitBake configuration"
DEFAULT_COMMAND_TIMEOUT: Final[float] = 300.0

BuildConfigKey = Literal[
    "path_to_build_folder",
    "path_to_env_script",
    "command_wrapper",
    "working_directory",
    "shell_env",
]
_PATH_FIELDS: Final[tuple[str, ...]] = (
    "path_to_bitbake_folder",
    "path_to_build_folder",
    "path_to_env_script",
    "working_directory",
    "cache_dir",
)


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BuildConfiguration(BaseModel):
    """Per-configuration overrides of the global build settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path_to_build_folder: Path | None = None
    path_to_env_script: Path | None = None
    command_wrapper: str | None = None
    working_directory: Path | None = None
    shell_env: dict[str, str] | None = None

    @field_validator("path_to_env_script", "command_wrapper", mode="before")
    @classmethod
    def _normalise_blank(cls, value: object) -> object:
        """Treat empty strings as unset values."""

        return _blank_to_none(value)


class BitbakeSettings(BaseModel):
    """Settings locating the toolchain and the build environment."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    path_to_bitbake_folder: Path = Path("sources/poky/bitbake")
    path_to_build_folder: Path = Path("build")
    path_to_env_script: Path | None = Path("sources/poky/oe-init-build-env")
    command_wrapper: str | None = None
    working_directory: Path = Path(".")
    shell_env: dict[str, str] = Field(default_factory=dict)
    build_configurations: dict[str, BuildConfiguration] = Field(default_factory=dict)
    active_build_configuration: str = DEFAULT_BUILD_CONFIGURATION
    sdk_mode: bool = False
    command_timeout: float | None = DEFAULT_COMMAND_TIMEOUT
    cache_dir: Path = Path(".bbscan-cache")

    @field_validator("path_to_env_script", "command_wrapper", mode="before")
    @classmethod
    def _normalise_blank(cls, value: object) -> object:
        """Treat empty strings as unset values since TOML has no null."""

        return _blank_to_none(value)

    def get_build_config(self, key: BuildConfigKey) -> Any:
        """Return ``key`` for the active build configuration.

        Values set on the active configuration take precedence over the global
        settings.

        Args:
            key: Name of the overridable setting.

        Returns:
            Any: Effective setting value.
        """

        configuration = self.build_configurations.get(self.active_build_configuration)
        if configuration is not None:
            value = getattr(configuration, key)
            if value is not None:
                return value
        return getattr(self, key)

    def with_active_configuration(self, name: str | None) -> BitbakeSettings:
        """Return a copy selecting ``name`` as the active build configuration.

        Args:
            name: Configuration identifier, ``None`` to keep the current one.

        Returns:
            BitbakeSettings: Updated settings.

        Raises:
            ConfigError: If ``name`` does not identify a declared configuration.
        """

        if name is None:
            return self
        if name != DEFAULT_BUILD_CONFIGURATION and name not in self.build_configurations:
            known = ", ".join(sorted(self.build_configurations)) or "<none>"
            raise ConfigError(f"Unknown build configuration '{name}' (known: {known})")
        return self.model_copy(update={"active_build_configuration": name})

    def anchored_at(self, root: Path) -> BitbakeSettings:
        """Return a copy whose relative paths are resolved against ``root``."""

        updates: dict[str, Any] = {}
        for field_name in _PATH_FIELDS:
            value = getattr(self, field_name)
            if isinstance(value, Path) and not value.is_absolute():
                updates[field_name] = (root / value).resolve()
        configurations: dict[str, BuildConfiguration] = {}
        for name, configuration in self.build_configurations.items():
            overrides: dict[str, Any] = {}
            for field_name in ("path_to_build_folder", "path_to_env_script", "working_directory"):
                value = getattr(configuration, field_name)
                if isinstance(value, Path) and not value.is_absolute():
                    overrides[field_name] = (root / value).resolve()
            configurations[name] = configuration.model_copy(update=overrides)
        updates["build_configurations"] = configurations
        return self.model_copy(update=updates)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation of the settings."""

        return self.model_dump(mode="json")


__all__ = [
    "DEFAULT_BUILD_CONFIGURATION",
    "DEFAULT_COMMAND_TIMEOUT",
    "BitbakeSettings",
    "BuildConfigKey",
    "BuildConfiguration",
    "ConfigError",
]
