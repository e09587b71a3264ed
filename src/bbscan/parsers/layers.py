# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for ``bitbake-layers show-layers`` output."""

from __future__ import annotations

import re
from typing import Final

from ..models import LayerInfo
from .base import find_marker, split_lines

LAYERS_HEADER: Final[re.Pattern[str]] = re.compile(r"^layer *path *priority$")
LAYER_MIN_FIELDS: Final[int] = 3


def parse_layers(output: str) -> list[LayerInfo]:
    """Parse the layer table printed by ``show-layers``.

    Example::

        layer                 path                                      priority
        ==========================================================================
        core                  /home/projects/poky/meta                  5

    Paths are returned exactly as printed; callers translate them between
    container and host namespaces.

    Args:
        output: Raw command output.

    Returns:
        list[LayerInfo]: Layers in listing order. Rows missing a field or
        carrying a non-numeric priority are dropped.

    Raises:
        ToolchainOutputShapeError: If the column header is absent.
    """

    lines = split_lines(output)
    header = find_marker(
        lines,
        lambda line: LAYERS_HEADER.match(line) is not None,
        description="layers in bitbake-layers output",
    )
    layers: list[LayerInfo] = []
    # The header is followed by a separator line of "=" characters.
    for line in lines[header + 2 :]:
        fields = line.split()
        if len(fields) < LAYER_MIN_FIELDS:
            continue
        name, path, priority = fields[:LAYER_MIN_FIELDS]
        try:
            layers.append(LayerInfo(name=name, path=path, priority=int(priority)))
        except ValueError:
            continue
    return layers


__all__ = ["parse_layers"]
