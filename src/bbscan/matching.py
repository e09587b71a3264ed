# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cross-reference parsed toolchain records into the project model."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence

from .files import extract_recipe_name, extract_recipe_version
from .models import ElementInfo, LayerInfo, ParsedPath
from .parsers import AppendsEntry, RecipeEntry

LOGGER = logging.getLogger(__name__)

WILDCARD_VERSION = "%"

PathResolve = Callable[[str], Awaitable[str]]
NameMatcher = Callable[[str, str], bool]


def exact_name(recipe_name: str, file_recipe_name: str) -> bool:
    """Return ``True`` when both names are equal."""

    return recipe_name == file_recipe_name


def contains_name(recipe_name: str, file_recipe_name: str) -> bool:
    """Return ``True`` when ``recipe_name`` contains the name encoded in a file."""

    return file_recipe_name in recipe_name


def find_layer(layers: Iterable[LayerInfo], layer_name: str) -> LayerInfo | None:
    """Return the layer referenced by ``layer_name``.

    ``show-recipes`` refers to layers by the basename of their directory
    (``meta``) while ``show-layers`` reports the collection name (``core``),
    so both are accepted.

    Args:
        layers: Layers reported by ``show-layers``.
        layer_name: Name printed next to a recipe.

    Returns:
        LayerInfo | None: Matching layer, ``None`` when unknown.
    """

    for layer in layers:
        if layer.name == layer_name or ParsedPath.from_path(layer.path).name == layer_name:
            return layer
    return None


def build_recipes(entries: Iterable[RecipeEntry], layers: Sequence[LayerInfo]) -> list[ElementInfo]:
    """Convert ``show-recipes`` entries into recipe records linked to their layer."""

    recipes: list[ElementInfo] = []
    for entry in entries:
        recipes.append(
            ElementInfo(
                name=entry.name,
                extra_info=f"layer: {entry.layer}\nversion: {entry.version}",
                layer_info=find_layer(layers, entry.layer),
                version=entry.version,
                skipped=entry.skipped,
            ),
        )
    return recipes


async def assign_recipe_paths(
    filenames: Iterable[str],
    recipes: Sequence[ElementInfo],
    matcher: NameMatcher,
    resolve: PathResolve,
) -> None:
    """Attach recipe files to the first unassigned recipe accepted by ``matcher``.

    The version encoded in the file name replaces the version listed by
    ``show-recipes`` since it reflects ``PREFERRED_VERSION`` selections.

    Args:
        filenames: Recipe file paths as printed by the toolchain.
        recipes: Candidate recipes, in priority order.
        matcher: Predicate receiving the recipe name and the file's recipe name.
        resolve: Coroutine translating container paths to host paths.
    """

    for filename in filenames:
        recipe_path = await resolve(filename.strip())
        name = extract_recipe_name(recipe_path)
        version = extract_recipe_version(recipe_path)
        recipe = next(
            (candidate for candidate in recipes if candidate.path is None and matcher(candidate.name, name)),
            None,
        )
        if recipe is None:
            continue
        recipe.path = ParsedPath.from_path(recipe_path)
        if recipe.version != version:
            recipe.version = version


async def assign_recipe_files(filenames: list[str], recipes: list[ElementInfo], resolve: PathResolve) -> None:
    """Assign ``show-recipes -f`` files to recipes.

    Both lists are sorted in place by descending length so longer names are
    considered first. An exact pass runs before a substring pass restricted to
    recipes left without a path, which catches recipes whose name carries a
    suffix such as ``gcc-source-13.2``.

    Args:
        filenames: Recipe file paths, sorted in place.
        recipes: Recipes of the active scan result, sorted in place.
        resolve: Coroutine translating container paths to host paths.
    """

    if not filenames:
        return
    filenames.sort(key=len, reverse=True)
    recipes.sort(key=lambda recipe: len(recipe.name), reverse=True)
    await assign_recipe_paths(filenames, recipes, exact_name, resolve)

    unassigned = [recipe for recipe in recipes if recipe.path is None]
    await assign_recipe_paths(filenames, unassigned, contains_name, resolve)


def append_version_matches(append_version: str | None, recipe_version: str | None) -> bool:
    """Return ``True`` when an overlay pinned to ``append_version`` applies.

    Args:
        append_version: Version tag attached to the overlay, ``None`` when absent.
        recipe_version: Version of the recipe.

    Returns:
        bool: ``True`` for unversioned or wildcard overlays, and when
        ``recipe_version`` starts with ``append_version``.
    """

    if append_version is None or append_version == WILDCARD_VERSION:
        return True
    if recipe_version is None:
        return False
    return recipe_version.startswith(append_version)


async def attach_appends(entries: Iterable[AppendsEntry], recipes: Sequence[ElementInfo], resolve: PathResolve) -> None:
    """Append overlay paths to the recipes they apply to."""

    for entry in entries:
        recipe = next((candidate for candidate in recipes if candidate.name == entry.recipe_name), None)
        if recipe is None:
            LOGGER.debug("No recipe named %s for %s", entry.recipe_name, entry.recipe_file)
            continue
        if not append_version_matches(entry.version, recipe.version):
            continue
        appends = list(recipe.appends or [])
        for append_path in entry.appends:
            appends.append(ParsedPath.from_path(await resolve(append_path)))
        recipe.appends = appends


__all__ = [
    "append_version_matches",
    "assign_recipe_files",
    "assign_recipe_paths",
    "attach_appends",
    "build_recipes",
    "contains_name",
    "exact_name",
    "find_layer",
]
