# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for recipe path assignment, overlay attachment and layer lookup."""

from __future__ import annotations

import pytest

from bbscan.files import extract_recipe_name, extract_recipe_version
from bbscan.matching import (
    append_version_matches,
    assign_recipe_files,
    attach_appends,
    build_recipes,
    find_layer,
)
from bbscan.models import ElementInfo, LayerInfo, ParsedPath
from bbscan.parsers import AppendsEntry, RecipeEntry

LAYERS = [
    LayerInfo(name="core", path="/yocto/poky/meta", priority=5),
    LayerInfo(name="custom", path="/yocto/meta-custom", priority=6),
]


async def _identity(path: str) -> str:
    return path


def test_extract_recipe_name_and_version() -> None:
    assert extract_recipe_name("/yocto/meta/busybox_1.36.2.bb") == "busybox"
    assert extract_recipe_version("/yocto/meta/busybox_1.36.2.bb") == "1.36.2"
    assert extract_recipe_name("core-image-minimal.bb") == "core-image-minimal"
    assert extract_recipe_version("core-image-minimal.bb") is None


def test_find_layer_matches_name_or_directory_basename() -> None:
    assert find_layer(LAYERS, "core") == LAYERS[0]
    assert find_layer(LAYERS, "meta") == LAYERS[0]
    assert find_layer(LAYERS, "meta-custom") == LAYERS[1]
    assert find_layer(LAYERS, "meta-unknown") is None


def test_build_recipes_links_layers() -> None:
    recipes = build_recipes(
        [
            RecipeEntry(name="acl", layer="meta", version="2.3.2"),
            RecipeEntry(name="wic-image", layer="meta-other", version="1.0", skipped="(skipped: no)"),
        ],
        LAYERS,
    )

    assert recipes[0].extra_info == "layer: meta\nversion: 2.3.2"
    assert recipes[0].layer_info == LAYERS[0]
    assert recipes[0].version == "2.3.2"
    assert recipes[1].layer_info is None
    assert recipes[1].skipped == "(skipped: no)"


@pytest.mark.asyncio
async def test_assign_recipe_files_prefers_file_version() -> None:
    recipes = [ElementInfo(name="busybox", version="1.36.1"), ElementInfo(name="acl", version="2.3.2")]
    filenames = ["/yocto/poky/meta/recipes-support/acl/acl_2.3.2.bb", "/yocto/poky/meta/busybox/busybox_1.36.2.bb"]

    await assign_recipe_files(filenames, recipes, _identity)

    by_name = {recipe.name: recipe for recipe in recipes}
    assert by_name["busybox"].path == ParsedPath.from_path("/yocto/poky/meta/busybox/busybox_1.36.2.bb")
    assert by_name["busybox"].version == "1.36.2"
    assert by_name["acl"].path is not None
    assert by_name["acl"].path.dir == "/yocto/poky/meta/recipes-support/acl"
    assert by_name["acl"].version == "2.3.2"


@pytest.mark.asyncio
async def test_assign_recipe_files_is_idempotent() -> None:
    recipes = [ElementInfo(name="busybox", version="1.36.1"), ElementInfo(name="zstd", version="1.5.5")]
    filenames = ["/yocto/meta/busybox_1.36.2.bb", "/yocto/meta/zstd_1.5.5.bb"]

    await assign_recipe_files(list(filenames), recipes, _identity)
    first = [(recipe.name, recipe.path, recipe.version) for recipe in recipes]
    await assign_recipe_files(list(filenames), recipes, _identity)

    assert [(recipe.name, recipe.path, recipe.version) for recipe in recipes] == first


@pytest.mark.asyncio
async def test_assign_recipe_files_falls_back_to_longest_containing_name() -> None:
    recipes = [ElementInfo(name="gcc-cross"), ElementInfo(name="gcc-source-13.2")]
    filenames = ["/yocto/meta/recipes-devtools/gcc/gcc-source_13.2.bb"]

    await assign_recipe_files(filenames, recipes, _identity)

    by_name = {recipe.name: recipe for recipe in recipes}
    assert by_name["gcc-source-13.2"].path is not None
    assert by_name["gcc-source-13.2"].path.base == "gcc-source_13.2.bb"
    assert by_name["gcc-source-13.2"].version == "13.2"
    assert by_name["gcc-cross"].path is None
    assert [recipe.name for recipe in recipes] == ["gcc-source-13.2", "gcc-cross"]


@pytest.mark.asyncio
async def test_assign_recipe_files_does_not_assign_shorter_prefix_recipe() -> None:
    recipes = [ElementInfo(name="gcc-source"), ElementInfo(name="gcc-source-13.2")]

    await assign_recipe_files(["/yocto/meta/gcc-source-13.2_13.2.0.bb"], recipes, _identity)

    by_name = {recipe.name: recipe for recipe in recipes}
    assert by_name["gcc-source-13.2"].path is not None
    assert by_name["gcc-source-13.2"].version == "13.2.0"
    assert by_name["gcc-source"].path is None


@pytest.mark.asyncio
async def test_assign_recipe_files_resolves_paths() -> None:
    recipes = [ElementInfo(name="busybox")]

    async def to_host(path: str) -> str:
        return path.replace("/work", "/home/user/yocto")

    await assign_recipe_files(["/work/meta/busybox_1.36.1.bb"], recipes, to_host)

    assert recipes[0].path is not None
    assert recipes[0].path.full_path == "/home/user/yocto/meta/busybox_1.36.1.bb"


@pytest.mark.parametrize(
    ("append_version", "recipe_version", "expected"),
    [
        ("1.36", "1.36.2", True),
        ("1.37", "1.36.2", False),
        ("%", "1.36.2", True),
        (None, "1.36.2", True),
        ("%", None, True),
        ("1.36", None, False),
    ],
)
def test_append_version_matches(append_version: str | None, recipe_version: str | None, expected: bool) -> None:
    assert append_version_matches(append_version, recipe_version) is expected


@pytest.mark.asyncio
async def test_attach_appends_filters_by_version() -> None:
    recipes = [ElementInfo(name="busybox", version="1.36.2"), ElementInfo(name="zstd", version="1.5.5")]
    entries = [
        AppendsEntry(recipe_file="busybox_1.36.bb", appends=["/yocto/meta-custom/busybox_1.36.bbappend"]),
        AppendsEntry(recipe_file="busybox_1.37.bb", appends=["/yocto/meta-custom/busybox_1.37.bbappend"]),
        AppendsEntry(recipe_file="unknown_1.0.bb", appends=["/yocto/meta-custom/unknown_1.0.bbappend"]),
    ]

    await attach_appends(entries, recipes, _identity)

    assert recipes[0].appends == [ParsedPath.from_path("/yocto/meta-custom/busybox_1.36.bbappend")]
    assert recipes[1].appends is None


@pytest.mark.asyncio
async def test_attach_appends_wildcard_matches_unversioned_recipe() -> None:
    recipes = [ElementInfo(name="psplash")]
    entries = [
        AppendsEntry(
            recipe_file="psplash_%.bb",
            appends=["/yocto/meta-poky/psplash_%.bbappend", "/yocto/meta-custom/psplash_%.bbappend"],
        ),
    ]

    await attach_appends(entries, recipes, _identity)

    assert recipes[0].appends is not None
    assert [append.dir for append in recipes[0].appends] == ["/yocto/meta-poky", "/yocto/meta-custom"]
