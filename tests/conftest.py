# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from helpers.fakes import BITBAKE_SCRIPT, FakeDriver, layer_table

from bbscan.config import BitbakeSettings
from bbscan.process_utils import CommandResult


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a small Yocto tree with two layers and a bitbake script."""

    root = tmp_path / "yocto"
    bitbake_bin = root / "poky" / "bitbake" / "bin"
    bitbake_bin.mkdir(parents=True)
    (bitbake_bin / "bitbake").write_text(BITBAKE_SCRIPT, encoding="utf-8")

    meta = root / "poky" / "meta"
    (meta / "classes").mkdir(parents=True)
    (meta / "classes" / "base.bbclass").write_text("", encoding="utf-8")
    (meta / "classes" / "kernel.bbclass").write_text("", encoding="utf-8")
    (meta / "conf").mkdir()
    (meta / "conf" / "layer.conf").write_text("", encoding="utf-8")
    busybox = meta / "recipes-core" / "busybox"
    busybox.mkdir(parents=True)
    (busybox / "busybox.inc").write_text("", encoding="utf-8")
    (busybox / "busybox_1.36.1.bb").write_text("", encoding="utf-8")

    custom = root / "meta-custom"
    (custom / "conf").mkdir(parents=True)
    (custom / "conf" / "layer.conf").write_text("", encoding="utf-8")
    (custom / "recipes-core" / "busybox").mkdir(parents=True)
    (custom / "recipes-core" / "busybox" / "busybox_%.bbappend").write_text("", encoding="utf-8")
    return root


@pytest.fixture
def settings(project: Path) -> BitbakeSettings:
    return BitbakeSettings(
        path_to_bitbake_folder=project / "poky" / "bitbake",
        path_to_build_folder=project / "build",
        path_to_env_script=project / "poky" / "oe-init-build-env",
        working_directory=project,
        cache_dir=project / ".bbscan-cache",
    )


@pytest.fixture
def project_outputs(project: Path) -> dict[str, str | CommandResult]:
    """Return canned output of every command issued by a full scan of ``project``."""

    meta = project / "poky" / "meta"
    custom = project / "meta-custom"
    return {
        "bitbake-layers show-layers": layer_table(("core", str(meta), 5), ("custom", str(custom), 6)),
        "bitbake-layers show-recipes": (
            "Loading cache...done.\n"
            "=== Available recipes: ===\n"
            "busybox:\n"
            "  meta                 1.36.1\n"
            "wic-image-minimal:\n"
            "  meta-custom          1.0 (skipped: missing wic dependencies)\n"
        ),
        "bitbake-layers show-recipes -f": (
            "=== Available recipes: ===\n"
            f"{meta}/recipes-core/busybox/busybox_1.36.1.bb\n"
            f"  {meta}/recipes-core/busybox/busybox_1.35.0.bb\n"
            f"{custom}/recipes-core/images/wic-image-minimal.bb (skipped: missing wic dependencies)\n"
        ),
        "bitbake-layers show-appends": (
            "=== Matched appended recipes ===\n"
            "busybox_1.36.1.bb:\n"
            f"  {custom}/recipes-core/busybox/busybox_%.bbappend\n"
        ),
        "bitbake-getvar OVERRIDES": (
            "#\n# $OVERRIDES [2 operations]\n#\n"
            'OVERRIDES="linux:x86-64:pn-defaultpkgname:qemuall:qemux86-64"\n'
        ),
        "devtool status": "NOTE: Starting bitbake server...\nbusybox: /work/workspace/sources/busybox\n",
    }


@pytest.fixture
def fake_driver(settings: BitbakeSettings, project_outputs: dict[str, str | CommandResult]) -> FakeDriver:
    return FakeDriver(settings=settings, outputs=dict(project_outputs))
