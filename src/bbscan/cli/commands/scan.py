# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``bbscan scan``: run a full project scan."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from ...cache import DirectoryCacheProvider
from ...driver import BitbakeDriver, BitbakeTaskDefinition, BitbakeTaskOptions
from ...events import EventType
from ...logging import configure_logging
from ...reporting import ScanStatusReporter, render_scan_summary
from ...scanner import BitbakeProjectScanner
from ..shared import CLIError, CLILogger, build_cli_logger, load_cli_settings

PARSE_TASK = BitbakeTaskDefinition(options=BitbakeTaskOptions(parse_only=True))


async def _scan(
    scanner: BitbakeProjectScanner,
    driver: BitbakeDriver,
    reporter: ScanStatusReporter,
    *,
    parse: bool,
    logger: CLILogger,
) -> None:
    parse_requests: list[bool] = []
    scanner.on_change.on(EventType.PARSE_RECIPES, lambda: parse_requests.append(True))
    await scanner.rescan_project()
    if not (parse and parse_requests):
        return
    reporter.parsing_started()
    result = await driver.execute(driver.compose_bitbake_command(PARSE_TASK))
    reporter.parsing_finished(result.returncode)
    if not result.ok:
        logger.warn(f"Recipe parsing failed with exit code {result.returncode}")


def scan_command(
    root: Path = typer.Option(Path("."), "--root", "-r", help="Project root."),
    config: str | None = typer.Option(None, "--config", "-c", help="Build configuration to activate."),
    sdk: bool = typer.Option(False, "--sdk", help="Only scan devtool workspaces (eSDK mode)."),
    json_output: bool = typer.Option(False, "--json", help="Print the scan result as JSON."),
    parse: bool = typer.Option(False, "--parse", help="Parse every recipe once the scan completes."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Neither restore nor save cached results."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Scan layers, recipes, overlays and devtool workspaces."""

    configure_logging(verbose=verbose)
    logger = build_cli_logger(emoji=not json_output)
    try:
        settings = load_cli_settings(root, config, logger=logger, sdk_mode=sdk)
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc

    driver = BitbakeDriver(settings)
    scanner = BitbakeProjectScanner(driver)
    reporter = ScanStatusReporter(scanner.on_change, driver.on_process_change)
    provider = DirectoryCacheProvider(settings.cache_dir)
    if not no_cache:
        scanner.restore_cache_result(provider)

    asyncio.run(_scan(scanner, driver, reporter, parse=parse, logger=logger))

    if not no_cache:
        scanner.save_cache_result(provider)
    result = scanner.active_scan_result
    if json_output:
        logger.echo_json(result.model_dump(mode="json", by_alias=True))
        return
    render_scan_summary(result, logger.console, title=settings.active_build_configuration)
    logger.ok(reporter.status_text)


def register(app: typer.Typer) -> None:
    """Register the scan command on ``app``."""

    app.command(name="scan", help="Scan the BitBake project.")(scan_command)


__all__ = ["register", "scan_command"]
