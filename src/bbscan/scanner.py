# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Orchestrate the toolchain commands building the project model.

A full pass runs the stages strictly in order: version, layers, classes,
include files, configuration files, recipes and their files, overlays,
overrides and devtool workspaces. Requests received while a pass is running
are coalesced into a single follow-up pass.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from .cache import ScanResultStore
from .discovery import CLASS_EXTENSION, CONF_EXTENSION, INCLUDE_EXTENSION, search_files
from .events import EventEmitter, EventType
from .interfaces import CacheProvider, ScanDriver
from .matching import assign_recipe_files, attach_appends, build_recipes
from .models import BitbakeScanResult, LayerInfo, ScanStatus
from .parsers import (
    parse_appends,
    parse_bitbake_version,
    parse_devtool_workspaces,
    parse_layers,
    parse_overrides,
    parse_recipe_files,
    parse_recipes,
)
from .process_utils import run_checked
from .reporting import log_scan_statistics
from .resolver import PathResolver

LOGGER = logging.getLogger(__name__)

SHOW_LAYERS: Final[str] = "bitbake-layers show-layers"
SHOW_RECIPES: Final[str] = "bitbake-layers show-recipes"
SHOW_RECIPE_FILES: Final[str] = "bitbake-layers show-recipes -f"
SHOW_APPENDS: Final[str] = "bitbake-layers show-appends"
GET_OVERRIDES: Final[str] = "bitbake-getvar OVERRIDES"
DEVTOOL_STATUS: Final[str] = "devtool status"


class BitbakeProjectScanner:
    """Scan a BitBake project and keep one result per build configuration.

    ``on_change`` emits :attr:`EventType.START_SCAN` when a full pass starts,
    :attr:`EventType.SCAN_COMPLETE` with the active result exactly once when it
    ends (successfully or not) and :attr:`EventType.PARSE_RECIPES` when recipes
    should be parsed by the toolchain.
    """

    def __init__(self, driver: ScanDriver, *, resolver: PathResolver | None = None) -> None:
        """Create a scanner issuing its commands through ``driver``.

        Args:
            driver: Runner bound to the build environment.
            resolver: Path resolver, created from ``driver`` when omitted.
        """

        self._driver = driver
        self._resolver = resolver or PathResolver(driver, driver.working_directory)
        self._scan_results: dict[str, BitbakeScanResult] = {}
        self._scan_status = ScanStatus()
        self.on_change = EventEmitter()

    @property
    def driver(self) -> ScanDriver:
        """Return the driver issuing toolchain commands."""

        return self._driver

    @property
    def resolver(self) -> PathResolver:
        """Return the resolver translating container paths."""

        return self._resolver

    @property
    def scan_status(self) -> ScanStatus:
        """Return the running and pending flags of the state machine."""

        return self._scan_status

    @property
    def scan_results(self) -> Mapping[str, BitbakeScanResult]:
        """Return the results of every build configuration scanned so far."""

        return self._scan_results

    @property
    def active_scan_result(self) -> BitbakeScanResult:
        """Return the result of the active build configuration, creating it on first access."""

        configuration = self._driver.active_build_configuration
        result = self._scan_results.get(configuration)
        if result is None:
            result = BitbakeScanResult()
            self._scan_results[configuration] = result
        return result

    def needs_container_paths_resolution(self) -> bool:
        """Return ``True`` when paths reported by the toolchain need translation."""

        return self._resolver.needs_container_paths_resolution

    def save_cache_result(self, provider: CacheProvider[Any]) -> None:
        """Persist every scan result through ``provider``."""

        ScanResultStore(provider).save(self._scan_results)

    def restore_cache_result(self, provider: CacheProvider[Any]) -> bool:
        """Replace the in-memory results with those persisted in ``provider``.

        Nothing is emitted: restoring happens before anybody listens.

        Returns:
            bool: ``True`` when a valid result was restored.
        """

        results = ScanResultStore(provider).load()
        if results is None:
            return False
        self._scan_results = results
        return True

    async def rescan_project(self) -> None:
        """Run a full scan pass, or schedule one when a pass is already running.

        Cancelling the awaiting task propagates ``CancelledError`` and clears the
        running flag. The interrupted pass has emitted ``startScan`` but emits
        no ``scanComplete``.
        """

        LOGGER.info("request rescanProject")
        if self._scan_status.scan_is_running:
            LOGGER.info("scan is already running, set the pending flag")
            self._scan_status.scan_is_pending = True
            return

        self._scan_status.scan_is_running = True
        try:
            while True:
                await self._run_full_pass()
                if not self._scan_status.scan_is_pending:
                    break
                self._scan_status.scan_is_pending = False
        finally:
            self._scan_status.scan_is_running = False

    async def rescan_devtool_workspaces(self) -> None:
        """Refresh devtool workspaces only; overlays need a full pass."""

        LOGGER.info("request rescanDevtoolWorkspaces")
        try:
            await self.scan_devtool_workspaces()
        except Exception as exc:
            LOGGER.error("scanning of devtool workspaces is aborted: %s", exc)
        self.on_change.emit(EventType.SCAN_COMPLETE, self.active_scan_result)

    async def _run_full_pass(self) -> None:
        LOGGER.info("start rescanProject")
        self.on_change.emit(EventType.START_SCAN)
        try:
            sdk_mode = self._driver.settings.sdk_mode
            if not sdk_mode:
                self.scan_bitbake_version()
                await self.scan_available_layers()
                self.scan_for_classes()
                self.scan_for_include_files()
                self.scan_for_conf_files()
                await self.scan_for_recipes()
                await self.scan_recipes_appends()
                await self.scan_overrides()
            await self.scan_devtool_workspaces()
            if not sdk_mode:
                self.parse_all_recipes()
            LOGGER.info("scan ready")
            log_scan_statistics(self.active_scan_result)
        except Exception as exc:
            LOGGER.error("scanning of project is aborted: %s", exc)
        self.on_change.emit(EventType.SCAN_COMPLETE, self.active_scan_result)

    async def _execute(self, command: str) -> str:
        return await run_checked(self._driver, command)

    async def resolve_container_path(self, path: str, *, quiet: bool = False) -> str:
        """Translate a path printed by the toolchain into a host path."""

        return await self._resolver.resolve_container_path(path, quiet=quiet)

    async def resolve_host_path(self, path: str, *, quiet: bool = False, modal: bool = False) -> str:
        """Translate a host path into the toolchain's filesystem."""

        return await self._resolver.resolve_host_path(path, quiet=quiet, modal=modal)

    def scan_bitbake_version(self) -> None:
        """Read the toolchain version from the ``bitbake`` script.

        Raises:
            OSError: If the script cannot be read.
            ToolchainOutputShapeError: If the script carries no version.
        """

        script_path = Path(self._driver.settings.path_to_bitbake_folder) / "bin" / "bitbake"
        version = parse_bitbake_version(script_path.read_text(encoding="utf-8"))
        LOGGER.info("Bitbake version: %s", version)
        self.active_scan_result.bitbake_version = version

    async def scan_available_layers(self) -> None:
        """Populate layers from ``show-layers``, learning the container mount on the way."""

        result = self.active_scan_result
        result.layers = []
        self._resolver.reset()
        output = await self._execute(SHOW_LAYERS)
        layers: list[LayerInfo] = []
        for layer in parse_layers(output):
            path = await self.resolve_container_path(layer.path)
            layers.append(layer.model_copy(update={"path": path}))
        result.layers = layers

    def scan_for_classes(self) -> None:
        """Collect ``.bbclass`` files of the scanned layers."""

        self.active_scan_result.classes = search_files(self.active_scan_result.layers, CLASS_EXTENSION)

    def scan_for_include_files(self) -> None:
        """Collect ``.inc`` files of the scanned layers."""

        self.active_scan_result.includes = search_files(self.active_scan_result.layers, INCLUDE_EXTENSION)

    def scan_for_conf_files(self) -> None:
        """Collect ``.conf`` files of the scanned layers."""

        self.active_scan_result.conf_files = search_files(self.active_scan_result.layers, CONF_EXTENSION)

    async def scan_for_recipes(self) -> None:
        """Populate recipes from ``show-recipes`` then attach their files."""

        result = self.active_scan_result
        result.recipes = []
        output = await self._execute(SHOW_RECIPES)
        result.recipes = build_recipes(parse_recipes(output), result.layers)
        await self.scan_for_recipes_path()

    async def scan_for_recipes_path(self) -> None:
        """Attach files listed by ``show-recipes -f`` to the scanned recipes."""

        output = await self._execute(SHOW_RECIPE_FILES)
        recipes = list(self.active_scan_result.recipes)
        await assign_recipe_files(parse_recipe_files(output), recipes, self.resolve_container_path)
        self.active_scan_result.recipes = recipes

    async def scan_recipes_appends(self) -> None:
        """Attach ``.bbappend`` overlays listed by ``show-appends``."""

        output = await self._execute(SHOW_APPENDS)
        await attach_appends(parse_appends(output), self.active_scan_result.recipes, self.resolve_container_path)

    async def scan_overrides(self) -> None:
        """Read ``OVERRIDES`` through ``bitbake-getvar``."""

        output = await self._execute(GET_OVERRIDES)
        self.active_scan_result.overrides = parse_overrides(output)

    async def scan_devtool_workspaces(self) -> None:
        """Populate workspaces from ``devtool status``."""

        result = self.active_scan_result
        result.workspaces = []
        output = await self._execute(DEVTOOL_STATUS)
        result.workspaces = parse_devtool_workspaces(output)

    def parse_all_recipes(self) -> None:
        """Ask listeners to have the toolchain parse every recipe."""

        self.on_change.emit(EventType.PARSE_RECIPES)


__all__ = [
    "DEVTOOL_STATUS",
    "GET_OVERRIDES",
    "SHOW_APPENDS",
    "SHOW_LAYERS",
    "SHOW_RECIPES",
    "SHOW_RECIPE_FILES",
    "BitbakeProjectScanner",
    "EventType",
]
