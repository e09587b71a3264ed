# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for ``devtool status`` output."""

from __future__ import annotations

import re
from typing import Final

from ..models import DevtoolWorkspaceInfo

WORKSPACE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<name>\S+):[ \t](?P<path>\S+)(?:[ \t]\(\S+\))?\r?$",
    re.MULTILINE,
)


def parse_devtool_workspaces(output: str) -> list[DevtoolWorkspaceInfo]:
    """Parse ``name: path [(recipe file)]`` lines from ``devtool status``.

    Args:
        output: Raw command output.

    Returns:
        list[DevtoolWorkspaceInfo]: Workspaces in listing order.
    """

    return [
        DevtoolWorkspaceInfo(name=match.group("name"), path=match.group("path"))
        for match in WORKSPACE_PATTERN.finditer(output)
    ]


__all__ = ["parse_devtool_workspaces"]
