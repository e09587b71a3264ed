# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (console output, errors, settings)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from ..config import BitbakeSettings, ConfigError, load_settings
from ..logging import fail as core_fail
from ..logging import ok as core_ok
from ..logging import warn as core_warn


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around the console helpers respecting CLI emoji settings."""

    console: Console
    use_emoji: bool

    def fail(self, message: str) -> None:
        """Print ``message`` as a failure."""

        core_fail(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        """Print ``message`` as a warning."""

        core_warn(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        """Print ``message`` as a success."""

        core_ok(message, use_emoji=self.use_emoji)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)

    def echo_json(self, payload: Any) -> None:
        """Write ``payload`` to stdout as indented JSON."""

        typer.echo(json.dumps(payload, indent=2))


def build_cli_logger(*, emoji: bool = True, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` bound to a dedicated Rich console."""

    console = Console(no_color=no_color, highlight=False)
    return CLILogger(console=console, use_emoji=emoji)


def load_cli_settings(
    root: Path,
    build_configuration: str | None,
    *,
    logger: CLILogger,
    sdk_mode: bool = False,
) -> BitbakeSettings:
    """Load settings for ``root`` and raise ``CLIError`` on failure.

    Args:
        root: Project root holding the configuration files.
        build_configuration: Build configuration to activate, ``None`` for the
            configured one.
        logger: CLI logger used to report failures.
        sdk_mode: ``True`` to force SDK mode regardless of the configuration.

    Returns:
        BitbakeSettings: Effective settings.

    Raises:
        CLIError: If the configuration is invalid.
    """

    try:
        settings = load_settings(root, build_configuration=build_configuration)
    except ConfigError as exc:
        logger.fail(f"Configuration invalid: {exc}")
        raise CLIError(str(exc)) from exc
    if sdk_mode:
        settings = settings.model_copy(update={"sdk_mode": True})
    return settings


__all__ = ["CLIError", "CLILogger", "build_cli_logger", "load_cli_settings"]
