# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``bbscan show``: print the cached scan result."""

from __future__ import annotations

from pathlib import Path

import typer

from ...cache import DirectoryCacheProvider, ScanResultStore
from ...reporting import render_scan_summary
from ..shared import CLIError, build_cli_logger, load_cli_settings


def show_command(
    root: Path = typer.Option(Path("."), "--root", "-r", help="Project root."),
    config: str | None = typer.Option(None, "--config", "-c", help="Build configuration to show."),
    json_output: bool = typer.Option(False, "--json", help="Print the scan result as JSON."),
) -> None:
    """Print the last scan result without running the toolchain."""

    logger = build_cli_logger(emoji=not json_output)
    try:
        settings = load_cli_settings(root, config, logger=logger)
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc

    results = ScanResultStore(DirectoryCacheProvider(settings.cache_dir)).load()
    result = results.get(settings.active_build_configuration) if results is not None else None
    if result is None:
        logger.fail(f"No valid cached scan result for '{settings.active_build_configuration}'; run 'bbscan scan'.")
        raise typer.Exit(code=1)
    if json_output:
        logger.echo_json(result.model_dump(mode="json", by_alias=True))
        return
    render_scan_summary(result, logger.console, title=settings.active_build_configuration)


def register(app: typer.Typer) -> None:
    """Register the show command on ``app``."""

    app.command(name="show", help="Show the cached scan result.")(show_command)


__all__ = ["register", "show_command"]
