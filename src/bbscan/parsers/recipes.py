# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers for ``bitbake-layers show-recipes`` listings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from .base import find_marker, split_lines

AVAILABLE_RECIPES_MARKER: Final[str] = "Available recipes"
RECIPE_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?P<name>\S.*?):\s*$")
RECIPE_ROW_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s+(?P<layer>\S+)\s+(?P<version>\S+)(?:\s+(?P<skipped>\(skipped[^\r\n]*\)))?\s*$",
)
RECIPE_FILE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<filename>[\w/.+-]+\.bb)(?:\s+\(skipped[^\r\n]*\))?\s*$",
)


@dataclass(frozen=True, slots=True)
class RecipeEntry:
    """Recipe block reported by ``show-recipes``."""

    name: str
    layer: str
    version: str
    skipped: str | None = None


def _close_block(entries: list[RecipeEntry], name: str | None, row: re.Match[str] | None) -> None:
    if name is None or row is None:
        return
    entries.append(
        RecipeEntry(
            name=name,
            layer=row.group("layer"),
            version=row.group("version"),
            skipped=row.group("skipped"),
        ),
    )


def parse_recipes(output: str) -> list[RecipeEntry]:
    """Parse the name/layer/version listing of ``show-recipes``.

    Example::

        === Available recipes: ===
        zstd:
          meta                 1.5.5
        virt-viewer:
          meta-virtualization  11.0 (skipped: one of 'wayland x11' needs to be in DISTRO_FEATURES)

    When a block lists several providers, the last row wins.

    Args:
        output: Raw command output.

    Returns:
        list[RecipeEntry]: One entry per recipe block.

    Raises:
        ToolchainOutputShapeError: If the ``Available recipes`` section is absent.
    """

    lines = split_lines(output)
    start = find_marker(lines, lambda line: AVAILABLE_RECIPES_MARKER in line, description="available recipes")
    entries: list[RecipeEntry] = []
    name: str | None = None
    last_row: re.Match[str] | None = None
    for line in lines[start:]:
        if name is not None and (row := RECIPE_ROW_PATTERN.match(line)):
            last_row = row
            continue
        _close_block(entries, name, last_row)
        name, last_row = None, None
        if header := RECIPE_NAME_PATTERN.match(line):
            name = header.group("name")
    _close_block(entries, name, last_row)
    return entries


def parse_recipe_files(output: str) -> list[str]:
    """Return the recipe files listed by ``show-recipes -f``.

    Indented entries are superseded versions and are ignored. Skipped recipes
    are kept since they remain part of the parsed metadata::

        === Available recipes: ===
        /yocto/poky/meta/recipes-core/busybox/busybox_1.36.2.bb
          /yocto/poky/meta/recipes-core/busybox/busybox_1.36.1.bb
        /yocto/poky/meta-selftest/recipes-test/images/wic-image-minimal.bb (skipped: ...)

    Args:
        output: Raw command output.

    Returns:
        list[str]: Recipe file paths in listing order.
    """

    filenames: list[str] = []
    for line in split_lines(output):
        if match := RECIPE_FILE_PATTERN.match(line):
            filenames.append(match.group("filename"))
    return filenames


__all__ = ["RecipeEntry", "parse_recipe_files", "parse_recipes"]
