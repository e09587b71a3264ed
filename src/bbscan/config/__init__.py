# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders."""

from __future__ import annotations

from .loaders import CONFIG_FILENAME, ConfigLoader, load_settings
from .models import (
    DEFAULT_BUILD_CONFIGURATION,
    DEFAULT_COMMAND_TIMEOUT,
    BitbakeSettings,
    BuildConfiguration,
    ConfigError,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_BUILD_CONFIGURATION",
    "DEFAULT_COMMAND_TIMEOUT",
    "BitbakeSettings",
    "BuildConfiguration",
    "ConfigError",
    "ConfigLoader",
    "load_settings",
]
