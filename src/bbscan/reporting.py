# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render scan results and follow scan progress."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from rich import box
from rich.console import Console
from rich.table import Table

from .events import EventEmitter, EventType
from .models import BitbakeScanResult

if TYPE_CHECKING:
    from .process_utils import CommandResult

LOGGER = logging.getLogger(__name__)

STATUS_PREFIX: Final[str] = "BitBake: "
_COMMAND_LABELS: Final[tuple[tuple[str, str], ...]] = (
    ("taskexp", "Running taskexp..."),
    ("toaster stop", "Stopping..."),
    ("toaster start", "Starting..."),
    ("which devtool", "Scanning..."),
    ("devtool", "Devtool..."),
)


def log_scan_statistics(result: BitbakeScanResult) -> None:
    """Log the size of every collection of ``result``."""

    LOGGER.info("Scan results:")
    LOGGER.info("******************************************************************")
    LOGGER.info("Layer:     %d", len(result.layers))
    LOGGER.info("Recipes:   %d", len(result.recipes))
    LOGGER.info("Inc-Files: %d", len(result.includes))
    LOGGER.info("bbclass:   %d", len(result.classes))
    LOGGER.info("conf Files:   %d", len(result.conf_files))
    LOGGER.info("overrides:   %d", len(result.overrides))
    LOGGER.info("Devtool-workspaces:   %d", len(result.workspaces))


def render_scan_summary(result: BitbakeScanResult, console: Console, *, title: str = "Scan Summary") -> None:
    """Print a table counting the collections of ``result``.

    Args:
        result: Scan result to summarise.
        console: Destination console.
        title: Table title, typically naming the build configuration.
    """

    table = Table(title=title, box=box.SIMPLE, expand=False)
    table.add_column("Collection", style="bold")
    table.add_column("Count", justify="right")
    rows = (
        ("Layers", len(result.layers)),
        ("Recipes", len(result.recipes)),
        ("Recipes with overlays", sum(1 for recipe in result.recipes if recipe.appends)),
        ("Include files", len(result.includes)),
        ("Classes", len(result.classes)),
        ("Configuration files", len(result.conf_files)),
        ("Overrides", len(result.overrides)),
        ("Devtool workspaces", len(result.workspaces)),
    )
    for label, count in rows:
        table.add_row(label, str(count))
    console.print(table)
    console.print(f"BitBake version: {result.bitbake_version or '-'}")


def render_workspaces(result: BitbakeScanResult, console: Console) -> None:
    """Print devtool workspaces with the recipe file known for each of them."""

    if not result.workspaces:
        console.print("No devtool workspaces.")
        return
    table = Table(title="Devtool Workspaces", box=box.SIMPLE, expand=True)
    table.add_column("Recipe", style="bold")
    table.add_column("Workspace", overflow="fold")
    table.add_column("Recipe file", overflow="fold")
    for workspace in result.workspaces:
        recipe = result.find_recipe(workspace.name)
        recipe_file = recipe.path.full_path if recipe is not None and recipe.path is not None else "-"
        table.add_row(workspace.name, workspace.path, recipe_file)
    console.print(table)


class ScanStatusReporter:
    """Summarise scanner and driver activity as a one-line status."""

    def __init__(self, scanner_events: EventEmitter, process_events: EventEmitter | None = None) -> None:
        """Subscribe to scanner events and, optionally, driver process events.

        Args:
            scanner_events: ``on_change`` emitter of a project scanner.
            process_events: ``on_process_change`` emitter of a driver.
        """

        self._result = BitbakeScanResult()
        self._scan_in_progress = False
        self._parsing_in_progress = False
        self._command_in_progress: str | None = None
        self._parse_exit_code = 0
        scanner_events.on(EventType.START_SCAN, self._on_start_scan)
        scanner_events.on(EventType.SCAN_COMPLETE, self._on_scan_complete)
        if process_events is not None:
            process_events.on("spawn", self._on_spawn)
            process_events.on("close", self._on_close)

    def _on_start_scan(self) -> None:
        self._scan_in_progress = True

    def _on_scan_complete(self, result: BitbakeScanResult) -> None:
        self._scan_in_progress = False
        self._result = result

    def _on_spawn(self, command: str) -> None:
        self._command_in_progress = command

    def _on_close(self, _result: CommandResult) -> None:
        self._command_in_progress = None

    def parsing_started(self) -> None:
        """Mark a recipe parse as running."""

        self._parsing_in_progress = True

    def parsing_finished(self, exit_code: int) -> None:
        """Record the exit status of the finished recipe parse."""

        self._parsing_in_progress = False
        self._parse_exit_code = exit_code

    @property
    def status_text(self) -> str:
        """Return the current status line."""

        if self._scan_in_progress:
            return f"{STATUS_PREFIX}Scanning..."
        if self._parsing_in_progress:
            return f"{STATUS_PREFIX}Parsing..."
        if self._command_in_progress is not None:
            label = next(
                (text for marker, text in _COMMAND_LABELS if marker in self._command_in_progress),
                "Building...",
            )
            return f"{STATUS_PREFIX}{label}"
        if self._parse_exit_code != 0:
            return f"{STATUS_PREFIX}Parsing error"
        return f"{STATUS_PREFIX}{len(self._result.recipes)} recipes scanned"


__all__ = ["ScanStatusReporter", "log_scan_statistics", "render_scan_summary", "render_workspaces"]
