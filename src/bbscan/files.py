# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers deriving recipe names and versions from BitBake file names."""

from __future__ import annotations

import posixpath
from typing import Final

VERSION_SEPARATOR: Final[str] = "_"


def _stem(filename: str) -> str:
    base = posixpath.basename(filename)
    stem, _ = posixpath.splitext(base)
    return stem


def extract_recipe_name(filename: str) -> str:
    """Return the recipe name encoded in ``filename``.

    ``busybox_1.36.2.bb`` yields ``busybox``.

    Args:
        filename: Recipe or append file name, optionally with directories.

    Returns:
        str: Text preceding the first version separator.
    """

    return _stem(filename).split(VERSION_SEPARATOR)[0]


def extract_recipe_version(filename: str) -> str | None:
    """Return the version encoded in ``filename`` when present.

    Args:
        filename: Recipe or append file name, optionally with directories.

    Returns:
        str | None: Text following the first version separator, or ``None``
        for unversioned files.
    """

    parts = _stem(filename).split(VERSION_SEPARATOR)
    if len(parts) < 2:
        return None
    return parts[1]


__all__ = ["extract_recipe_name", "extract_recipe_version"]
