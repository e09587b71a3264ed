# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for ``bitbake-getvar`` assignments."""

from __future__ import annotations

import re
from typing import Final

OVERRIDES_PATTERN: Final[re.Pattern[str]] = re.compile(r'^OVERRIDES="(?P<value>.*)"\r?$', re.MULTILINE)
OVERRIDES_SEPARATOR: Final[str] = ":"


def parse_overrides(output: str) -> list[str]:
    """Return the ordered ``OVERRIDES`` entries from ``bitbake-getvar`` output.

    Args:
        output: Raw command output containing ``OVERRIDES="a:b:c"``.

    Returns:
        list[str]: Override names in priority order, split on every ``:`` so
        blank entries are kept; empty when the assignment is missing.
    """

    match = OVERRIDES_PATTERN.search(output)
    if match is None:
        return []
    return match.group("value").split(OVERRIDES_SEPARATOR)


__all__ = ["parse_overrides"]
