# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models describing a scanned BitBake project."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

SCAN_RESULT_VERSION: Final[int] = 3


class ParsedPath(BaseModel):
    """POSIX path split into root, directory, basename, extension and stem."""

    model_config = ConfigDict(frozen=True)

    root: str = ""
    dir: str = ""
    base: str = ""
    ext: str = ""
    name: str = ""

    @classmethod
    def from_path(cls, path: str) -> ParsedPath:
        """Split ``path`` into its components.

        Args:
            path: POSIX path to split. Trailing separators are ignored.

        Returns:
            ParsedPath: Components of ``path``.
        """

        trimmed = path.rstrip("/") or path
        root = "/" if trimmed.startswith("/") else ""
        base = posixpath.basename(trimmed)
        directory = posixpath.dirname(trimmed)
        stem, ext = posixpath.splitext(base)
        return cls(root=root, dir=directory, base=base, ext=ext, name=stem)

    @property
    def full_path(self) -> str:
        """Return the path rebuilt from ``dir`` and ``base``."""

        if not self.dir:
            return self.base
        return posixpath.join(self.dir, self.base)


class LayerInfo(BaseModel):
    """Build layer reported by ``bitbake-layers show-layers``."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    priority: int


class ElementInfo(BaseModel):
    """Recipe, class, include or configuration file matched to a layer."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    name: str
    path: ParsedPath | None = None
    extra_info: str = Field(default="", alias="extraInfo")
    layer_info: LayerInfo | None = Field(default=None, alias="layerInfo")
    version: str | None = None
    skipped: str | None = None
    appends: list[ParsedPath] | None = None


class DevtoolWorkspaceInfo(BaseModel):
    """Recipe currently checked out in a devtool workspace."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str


class BitbakeScanResult(BaseModel):
    """Latest scanned collections for one build configuration."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    layers: list[LayerInfo] = Field(default_factory=list, alias="_layers")
    classes: list[ElementInfo] = Field(default_factory=list, alias="_classes")
    includes: list[ElementInfo] = Field(default_factory=list, alias="_includes")
    overrides: list[str] = Field(default_factory=list, alias="_overrides")
    recipes: list[ElementInfo] = Field(default_factory=list, alias="_recipes")
    workspaces: list[DevtoolWorkspaceInfo] = Field(default_factory=list, alias="_workspaces")
    conf_files: list[ElementInfo] = Field(default_factory=list, alias="_confFiles")
    bitbake_version: str = Field(default="", alias="_bitbakeVersion")

    def find_recipe(self, name: str) -> ElementInfo | None:
        """Return the first recipe called ``name`` when present."""

        return next((recipe for recipe in self.recipes if recipe.name == name), None)


@dataclass(slots=True)
class ScanStatus:
    """Re-entrancy state of a project scanner."""

    scan_is_running: bool = False
    scan_is_pending: bool = False


@dataclass(slots=True)
class MountMapping:
    """Bind-mount endpoints linking a build container to the host."""

    container_mount_point: str | None = None
    host_mount_point: str | None = None

    def reset(self) -> None:
        """Forget both endpoints."""

        self.container_mount_point = None
        self.host_mount_point = None


__all__ = [
    "SCAN_RESULT_VERSION",
    "BitbakeScanResult",
    "DevtoolWorkspaceInfo",
    "ElementInfo",
    "LayerInfo",
    "MountMapping",
    "ParsedPath",
    "ScanStatus",
]
