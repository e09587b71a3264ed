# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for ``bitbake-layers show-appends`` output."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

from .base import split_lines

RECIPE_FILE_HEADER: Final[re.Pattern[str]] = re.compile(r"^(?P<recipe>\S.*\.bb):\s*$")
APPEND_PATH_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s+(?P<path>/\S*\.bbappend)\s*$")


@dataclass(slots=True)
class AppendsEntry:
    """Overlays applied to one recipe file."""

    recipe_file: str
    appends: list[str] = field(default_factory=list)

    @property
    def recipe_name(self) -> str:
        """Return the recipe name encoded before the first underscore."""

        return self.recipe_file.split("_")[0].split(".")[0]

    @property
    def version(self) -> str | None:
        """Return the version tag of the recipe file, ``None`` when unversioned."""

        parts = self.recipe_file.split("_")
        if len(parts) < 2:
            return None
        return parts[1].split(".bb")[0]


def parse_appends(output: str) -> list[AppendsEntry]:
    """Parse recipe files and the ``.bbappend`` overlays applied to them.

    Example::

        === Matched appended recipes ===
        busybox_1.36.1.bb:
          /yocto/poky/meta-poky/recipes-core/busybox/busybox_%.bbappend

    Args:
        output: Raw command output.

    Returns:
        list[AppendsEntry]: Entries having at least one overlay path.
    """

    entries: list[AppendsEntry] = []
    current: AppendsEntry | None = None
    for line in split_lines(output):
        if current is not None and (match := APPEND_PATH_PATTERN.match(line)):
            current.appends.append(match.group("path"))
            continue
        if current is not None and current.appends:
            entries.append(current)
        current = None
        if header := RECIPE_FILE_HEADER.match(line):
            current = AppendsEntry(recipe_file=header.group("recipe"))
    if current is not None and current.appends:
        entries.append(current)
    return entries


__all__ = ["AppendsEntry", "parse_appends"]
