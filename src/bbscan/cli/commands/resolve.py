# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``bbscan resolve``: translate a path across the build container mount."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from ...driver import BitbakeDriver
from ...errors import BitbakeScanError
from ...logging import configure_logging
from ...resolver import PathResolver, ResolutionNotice, ResolveDirection, default_notice_handler
from ...scanner import BitbakeProjectScanner
from ..shared import CLIError, build_cli_logger, load_cli_settings


async def _resolve(scanner: BitbakeProjectScanner, path: str, direction: ResolveDirection) -> str:
    await scanner.scan_available_layers()
    return await scanner.resolver.resolve(path, direction, modal=True)


def resolve_command(
    path: str = typer.Argument(..., help="Path to translate."),
    root: Path = typer.Option(Path("."), "--root", "-r", help="Project root."),
    config: str | None = typer.Option(None, "--config", "-c", help="Build configuration to activate."),
    to_container: bool = typer.Option(
        False,
        "--to-container",
        help="Translate a host path into the container instead of the reverse.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Learn the container mount from the layer listing, then translate PATH."""

    configure_logging(verbose=verbose)
    logger = build_cli_logger()
    try:
        settings = load_cli_settings(root, config, logger=logger)
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc

    notices: list[ResolutionNotice] = []

    def _record(notice: ResolutionNotice) -> None:
        notices.append(notice)
        default_notice_handler(notice)

    driver = BitbakeDriver(settings)
    scanner = BitbakeProjectScanner(driver, resolver=PathResolver(driver, driver.working_directory, notify=_record))
    direction = ResolveDirection.HOST_TO_CONTAINER if to_container else ResolveDirection.CONTAINER_TO_HOST
    try:
        resolved = asyncio.run(_resolve(scanner, path, direction))
    except BitbakeScanError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc

    logger.echo(resolved)
    if any(notice.modal for notice in notices):
        raise typer.Exit(code=1)


def register(app: typer.Typer) -> None:
    """Register the resolve command on ``app``."""

    app.command(name="resolve", help="Translate a path between the container and the host.")(resolve_command)


__all__ = ["register", "resolve_command"]
