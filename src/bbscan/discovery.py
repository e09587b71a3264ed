# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem walks collecting classes, include and configuration files."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from .models import ElementInfo, LayerInfo, ParsedPath

LOGGER = logging.getLogger(__name__)

CLASS_EXTENSION = "bbclass"
INCLUDE_EXTENSION = "inc"
CONF_EXTENSION = "conf"


def _raise(error: OSError) -> None:
    raise error


def iter_layer_files(root: Path, extension: str) -> Iterator[Path]:
    """Yield files below ``root`` whose name ends with ``.<extension>``.

    Directories and files are visited in sorted order.

    Raises:
        FileNotFoundError: If ``root`` does not exist.
        OSError: If a directory cannot be listed.
    """

    if not root.is_dir():
        raise FileNotFoundError(f"Layer directory not found: {root}")
    suffix = f".{extension}"
    for current, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.endswith(suffix):
                yield Path(current) / filename


def search_files(layers: Iterable[LayerInfo], extension: str) -> list[ElementInfo]:
    """Collect every ``.<extension>`` file of ``layers``.

    Args:
        layers: Layers whose directories are walked, in order.
        extension: File extension without the leading dot.

    Returns:
        list[ElementInfo]: One record per file, linked to its layer.

    Raises:
        OSError: If a layer directory is missing or unreadable.
    """

    elements: list[ElementInfo] = []
    for layer in layers:
        try:
            for file_path in iter_layer_files(Path(layer.path), extension):
                parsed = ParsedPath.from_path(file_path.as_posix())
                elements.append(
                    ElementInfo(
                        name=parsed.name,
                        path=parsed,
                        extra_info=f"layer: {layer.name}",
                        layer_info=layer,
                    ),
                )
        except OSError as exc:
            LOGGER.error("find error: extension: %s layer.path: %s error: %s", extension, layer.path, exc)
            raise
    return elements


__all__ = ["CLASS_EXTENSION", "CONF_EXTENSION", "INCLUDE_EXTENSION", "iter_layer_files", "search_files"]
