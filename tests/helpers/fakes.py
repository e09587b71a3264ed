# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Test doubles shared across the scanner, resolver and CLI suites."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from bbscan.config import BitbakeSettings
from bbscan.driver import BitbakeDriver
from bbscan.events import EventEmitter
from bbscan.process_utils import CommandResult

BITBAKE_SCRIPT = '#!/usr/bin/env python3\n__version__ = "2.8.0"\n'


@dataclass
class FakeDriver:
    """Driver replaying canned toolchain output keyed by command text.

    Unknown commands fail with exit status 127. ``test -e`` checks succeed for
    the paths listed in ``container_paths``.
    """

    settings: BitbakeSettings
    outputs: dict[str, str | CommandResult] = field(default_factory=dict)
    container_paths: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)
    killed: int = 0
    on_process_change: EventEmitter = field(default_factory=EventEmitter)

    @property
    def active_build_configuration(self) -> str:
        return self.settings.active_build_configuration

    def working_directory(self) -> Path:
        return Path(self.settings.get_build_config("working_directory"))

    compose_bitbake_command = staticmethod(BitbakeDriver.compose_bitbake_command)

    async def execute(self, command: str, *, timeout: float | None = None) -> CommandResult:
        self.calls.append(command)
        self.on_process_change.emit("spawn", command)
        if command.startswith("test -e "):
            checked = command.removeprefix("test -e ").strip("'")
            returncode = 0 if checked in self.container_paths else 1
            result = CommandResult(command=command, returncode=returncode, stdout="", stderr="")
        else:
            output = self.outputs.get(command)
            if isinstance(output, CommandResult):
                result = output
            elif output is None:
                result = CommandResult(command=command, returncode=127, stdout="", stderr=f"{command}: not found")
            else:
                result = CommandResult(command=command, returncode=0, stdout=output, stderr="")
        self.on_process_change.emit("close", result)
        return result

    async def kill_bitbake(self) -> None:
        self.killed += 1


def layer_table(*rows: tuple[str, str, int]) -> str:
    """Return ``show-layers`` output listing ``rows``."""

    lines = [
        "NOTE: Starting bitbake server...",
        "layer                 path                                      priority",
        "==========================================================================",
    ]
    lines.extend(f"{name:<22}{path:<42} {priority}" for name, path, priority in rows)
    return "\n".join(lines) + "\n"


__all__ = ["BITBAKE_SCRIPT", "FakeDriver", "layer_table"]
