# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``bbscan workspaces``: refresh devtool workspaces only."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from ...cache import DirectoryCacheProvider
from ...driver import BitbakeDriver
from ...logging import configure_logging
from ...reporting import render_workspaces
from ...scanner import BitbakeProjectScanner
from ..shared import CLIError, build_cli_logger, load_cli_settings


def workspaces_command(
    root: Path = typer.Option(Path("."), "--root", "-r", help="Project root."),
    config: str | None = typer.Option(None, "--config", "-c", help="Build configuration to activate."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """List devtool workspaces with the recipe file known for each."""

    configure_logging(verbose=verbose)
    logger = build_cli_logger()
    try:
        settings = load_cli_settings(root, config, logger=logger)
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc

    scanner = BitbakeProjectScanner(BitbakeDriver(settings))
    provider = DirectoryCacheProvider(settings.cache_dir)
    scanner.restore_cache_result(provider)
    asyncio.run(scanner.rescan_devtool_workspaces())
    scanner.save_cache_result(provider)
    render_workspaces(scanner.active_scan_result, logger.console)


def register(app: typer.Typer) -> None:
    """Register the workspaces command on ``app``."""

    app.command(name="workspaces", help="Refresh and list devtool workspaces.")(workspaces_command)


__all__ = ["register", "workspaces_command"]
