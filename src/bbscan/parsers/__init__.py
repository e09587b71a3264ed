# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers turning toolchain command output into typed records."""

from __future__ import annotations

from .appends import AppendsEntry, parse_appends
from .devtool import parse_devtool_workspaces
from .layers import parse_layers
from .recipes import RecipeEntry, parse_recipe_files, parse_recipes
from .variables import parse_overrides
from .version import parse_bitbake_version

__all__ = [
    "AppendsEntry",
    "RecipeEntry",
    "parse_appends",
    "parse_bitbake_version",
    "parse_devtool_workspaces",
    "parse_layers",
    "parse_overrides",
    "parse_recipe_files",
    "parse_recipes",
]
