# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser extracting the BitBake version from its launcher script."""

from __future__ import annotations

import re
from typing import Final

from ..errors import ToolchainOutputShapeError

VERSION_PATTERN: Final[re.Pattern[str]] = re.compile(r'__version__ = "(?P<version>\d+\.\d+\.\d+)"')


def parse_bitbake_version(script: str) -> str:
    """Return the ``__version__`` literal declared in ``bin/bitbake``.

    Args:
        script: Content of the ``bitbake`` launcher script.

    Returns:
        str: Version string such as ``2.6.1``.

    Raises:
        ToolchainOutputShapeError: If no version literal is declared.
    """

    match = VERSION_PATTERN.search(script)
    if match is None:
        raise ToolchainOutputShapeError("Failed to find bitbake version")
    return match.group("version")


__all__ = ["parse_bitbake_version"]
