# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared helpers for parsing toolchain command output."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from ..errors import ToolchainOutputShapeError

_LINE_SPLIT = re.compile(r"\r?\n")


def split_lines(output: str) -> list[str]:
    """Split ``output`` on LF or CRLF line endings."""

    return _LINE_SPLIT.split(output)


def find_marker(
    lines: Sequence[str],
    predicate: Callable[[str], bool],
    *,
    description: str,
) -> int:
    """Return the index of the first line satisfying ``predicate``.

    Args:
        lines: Output lines to search.
        predicate: Callable identifying the marker line.
        description: Human-readable marker description used in errors.

    Returns:
        int: Index of the marker line.

    Raises:
        ToolchainOutputShapeError: If no line satisfies ``predicate``.
    """

    for index, line in enumerate(lines):
        if predicate(line):
            return index
    raise ToolchainOutputShapeError(f"Failed to find {description}")


__all__ = ["find_marker", "split_lines"]
