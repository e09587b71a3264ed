# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run toolchain commands inside the configured build environment.

Every command is prefixed by an init script sourcing the environment script
of the active build configuration and, when a ``command_wrapper`` is set (for
example ``docker exec -i builder``), wrapped so it runs inside the container.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
from dataclasses import replace
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from .config import BitbakeSettings
from .events import EventEmitter
from .interfaces import ScanDriver
from .process_utils import CommandOptions, CommandOverrideMapping, CommandResult, run_shell

LOGGER = logging.getLogger(__name__)

SPAWN_EVENT: Final[str] = "spawn"
CLOSE_EVENT: Final[str] = "close"


class BitbakeTaskOptions(BaseModel):
    """Flags of a ``bitbake`` invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    continue_: bool = Field(default=False, alias="continue")
    force: bool = False
    parse_only: bool = Field(default=False, alias="parseOnly")
    env: bool = False


_OPTION_FLAGS: Final[tuple[tuple[str, str], ...]] = (
    ("continue_", "-k"),
    ("force", "-f"),
    ("parse_only", "-p"),
    ("env", "-e"),
)


class BitbakeTaskDefinition(BaseModel):
    """Description of a ``bitbake`` run: recipes, task and flags."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recipes: list[str] = Field(default_factory=list)
    task: str | None = None
    options: BitbakeTaskOptions = Field(default_factory=BitbakeTaskOptions)
    special_command: str | None = Field(default=None, alias="specialCommand")


class BitbakeDriver(ScanDriver):
    """Command runner bound to one set of :class:`BitbakeSettings`."""

    def __init__(self, settings: BitbakeSettings) -> None:
        """Bind the driver to ``settings``.

        Args:
            settings: Toolchain locations and build configurations.
        """

        self._settings = settings
        self._base_options = CommandOptions(timeout=settings.command_timeout)
        self._processes: set[asyncio.subprocess.Process] = set()
        self.on_process_change = EventEmitter()

    @property
    def settings(self) -> BitbakeSettings:
        """Return the settings the driver was created with."""

        return self._settings

    @property
    def active_build_configuration(self) -> str:
        """Return the identifier of the selected build configuration."""

        return self._settings.active_build_configuration

    def working_directory(self) -> Path:
        """Return the working directory of the active build configuration."""

        return Path(self._settings.get_build_config("working_directory"))

    def compose_init_script(self) -> str:
        """Return the shell prologue preparing the build environment."""

        lines = ["set -e"]
        shell_env: dict[str, str] = self._settings.get_build_config("shell_env") or {}
        for name, value in shell_env.items():
            lines.append(f"export {name}={shlex.quote(value)}")
        build_folder = str(self._settings.get_build_config("path_to_build_folder"))
        env_script = self._settings.get_build_config("path_to_env_script")
        if env_script is not None:
            lines.append(f". {shlex.quote(str(env_script))} {shlex.quote(build_folder)}")
        else:
            bin_folder = str(Path(self._settings.path_to_bitbake_folder) / "bin")
            lines.append(f'export PATH={shlex.quote(bin_folder)}:"$PATH"')
            lines.append(f"cd {shlex.quote(build_folder)}")
        return "\n".join(lines)

    def compose_bitbake_script(self, command: str) -> str:
        """Return the init script followed by ``command``."""

        return f"{self.compose_init_script()}\n{command}"

    def compose_command(self, command: str) -> str:
        """Return the shell line running ``command`` in the build environment."""

        script = self.compose_bitbake_script(command)
        wrapper = self._settings.get_build_config("command_wrapper")
        if wrapper:
            return f"{wrapper} {shlex.quote(script)}"
        return f"bash -c {shlex.quote(script)}"

    @staticmethod
    def compose_bitbake_command(task: BitbakeTaskDefinition) -> str:
        """Return the ``bitbake`` command line described by ``task``.

        A ``special_command`` replaces the whole command line.

        Args:
            task: Recipes, task name and flags to run.

        Returns:
            str: Command text suitable for :meth:`execute`.
        """

        if task.special_command is not None:
            return task.special_command
        parts = ["bitbake", *(shlex.quote(recipe) for recipe in task.recipes)]
        if task.task is not None:
            parts.extend(["-c", shlex.quote(task.task)])
        for attribute, flag in _OPTION_FLAGS:
            if getattr(task.options, attribute):
                parts.append(flag)
        return " ".join(parts)

    async def execute(self, command: str, *, timeout: float | None = None) -> CommandResult:
        """Run ``command`` in the build environment and capture its output.

        Args:
            command: Toolchain command text.
            timeout: Timeout in seconds, defaults to ``settings.command_timeout``.

        Returns:
            CommandResult: Exit status and output. ``command`` holds the
            toolchain command, not the wrapped shell line.

        Raises:
            ValueError: If ``timeout`` is negative.
        """

        overrides: CommandOverrideMapping = {"cwd": self.working_directory()}
        if timeout is not None:
            overrides = {**overrides, "timeout": timeout}
        options = self._base_options.with_overrides(overrides)
        LOGGER.debug("Executing bitbake command: %s", command)
        self.on_process_change.emit(SPAWN_EVENT, command)
        try:
            result = await run_shell(
                self.compose_command(command),
                options=options,
                on_abort=self.kill_bitbake,
                on_spawn=self._processes.add,
            )
        finally:
            self._forget_finished()
        result = replace(result, command=command)
        self.on_process_change.emit(CLOSE_EVENT, result)
        return result

    async def kill_bitbake(self) -> None:
        """Kill every command started by this driver that is still running."""

        for process in list(self._processes):
            if process.returncode is None:
                LOGGER.info("Killing bitbake process %s", process.pid)
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
        self._forget_finished()

    def _forget_finished(self) -> None:
        self._processes = {process for process in self._processes if process.returncode is None}


__all__ = [
    "CLOSE_EVENT",
    "SPAWN_EVENT",
    "BitbakeDriver",
    "BitbakeTaskDefinition",
    "BitbakeTaskOptions",
]
