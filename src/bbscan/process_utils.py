# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Asynchronous wrappers around shell command execution."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Final, Literal

from .errors import CommandExecutionError

if TYPE_CHECKING:
    from .interfaces import CommandRunner

LOGGER = logging.getLogger(__name__)

TIMEOUT_RETURNCODE: Final[int] = 124

CommandOptionKey = Literal["cwd", "env", "timeout"]
CommandOverrideValue = Path | Mapping[str, str] | float | int | None
CommandOverrideMapping = Mapping[CommandOptionKey, CommandOverrideValue]
AbortCallback = Callable[[], Awaitable[None]]
SpawnCallback = Callable[[asyncio.subprocess.Process], None]

_COMMAND_KEYS: Final[frozenset[str]] = frozenset({"cwd", "env", "timeout"})


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable shell execution options."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None

    def with_overrides(self, overrides: CommandOverrideMapping) -> CommandOptions:
        """Return a new options instance with ``overrides`` applied.

        Args:
            overrides: Mapping of option names to replacement values.

        Returns:
            CommandOptions: Updated options instance.

        Raises:
            TypeError: If ``overrides`` includes an unknown option name.
            ValueError: When a timeout override is negative.
        """

        unknown = [key for key in overrides if key not in _COMMAND_KEYS]
        if unknown:
            message = ", ".join(sorted(unknown))
            raise TypeError(f"Unknown command option(s): {message}")
        timeout = overrides.get("timeout", self.timeout)
        if timeout is not None:
            if not isinstance(timeout, (int, float)):
                raise TypeError("timeout override must be a number or None")
            if timeout < 0:
                raise ValueError("timeout override must be non-negative")
            timeout = float(timeout)
        return replace(self, **{**dict(overrides), "timeout": timeout})


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a shell command."""

    command: str
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        """Return ``True`` when the command exited successfully."""

        return self.returncode == 0


def _ensure_text(value: str | bytes | None) -> str:
    """Return ``value`` decoded to text when supplied as ``bytes``."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return value.decode(errors="ignore")


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill ``process`` when it is still running and reap it."""

    if process.returncode is not None:
        return
    with contextlib.suppress(ProcessLookupError):
        process.kill()
    await process.wait()


async def run_shell(
    command: str,
    *,
    options: CommandOptions | None = None,
    on_abort: AbortCallback | None = None,
    on_spawn: SpawnCallback | None = None,
) -> CommandResult:
    """Run ``command`` through the shell and capture its output.

    A command exceeding ``options.timeout`` is killed, ``on_abort`` is awaited
    and a result with :data:`TIMEOUT_RETURNCODE` is returned. Cancelling the
    awaiting task kills the process, awaits ``on_abort`` and re-raises.

    Args:
        command: Shell command text.
        options: Working directory, environment and timeout.
        on_abort: Coroutine factory invoked after a timeout or cancellation.
        on_spawn: Callback receiving the started process.

    Returns:
        CommandResult: Exit status and decoded output streams.
    """

    resolved = options or CommandOptions()
    process = await asyncio.create_subprocess_shell(
        command,
        cwd=str(resolved.cwd) if resolved.cwd is not None else None,
        env=dict(resolved.env) if resolved.env is not None else None,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    if on_spawn is not None:
        on_spawn(process)
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=resolved.timeout)
    except TimeoutError:
        await _terminate(process)
        if on_abort is not None:
            await on_abort()
        return CommandResult(
            command=command,
            returncode=TIMEOUT_RETURNCODE,
            stdout="",
            stderr=f"Command timed out after {resolved.timeout:.1f}s",
            timed_out=True,
        )
    except asyncio.CancelledError:
        await _terminate(process)
        if on_abort is not None:
            await on_abort()
        raise
    return CommandResult(
        command=command,
        returncode=process.returncode if process.returncode is not None else 0,
        stdout=_ensure_text(stdout),
        stderr=_ensure_text(stderr),
    )


async def run_checked(runner: CommandRunner, command: str, *, timeout: float | None = None) -> str:
    """Run ``command`` through ``runner`` and return its standard output.

    Args:
        runner: Command runner bound to the build environment.
        command: Toolchain command text.
        timeout: Optional timeout in seconds.

    Returns:
        str: Captured standard output.

    Raises:
        CommandExecutionError: If the command exits with a non-zero status or
            times out.
    """

    result = await runner.execute(command, timeout=timeout)
    if result.returncode != 0:
        LOGGER.error("Failed to execute bitbake command: %s", command)
        raise CommandExecutionError(command, result.returncode, result.stderr)
    return result.stdout


__all__ = [
    "TIMEOUT_RETURNCODE",
    "AbortCallback",
    "CommandOptions",
    "CommandOverrideMapping",
    "CommandResult",
    "run_checked",
    "run_shell",
]
