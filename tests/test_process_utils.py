# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for asynchronous shell helpers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from bbscan.errors import CommandExecutionError
from bbscan.process_utils import TIMEOUT_RETURNCODE, CommandOptions, CommandResult, run_checked, run_shell


@dataclass
class _StaticRunner:
    result: CommandResult
    timeouts: list[float | None] = field(default_factory=list)

    async def execute(self, command: str, *, timeout: float | None = None) -> CommandResult:
        self.timeouts.append(timeout)
        return self.result


def test_with_overrides_returns_updated_copy(tmp_path: Path) -> None:
    options = CommandOptions(timeout=5)

    updated = options.with_overrides({"cwd": tmp_path, "timeout": 2})

    assert updated.cwd == tmp_path
    assert updated.timeout == 2.0
    assert options.cwd is None


def test_with_overrides_rejects_unknown_keys() -> None:
    with pytest.raises(TypeError, match="Unknown command option"):
        CommandOptions().with_overrides({"shell": True})  # type: ignore[dict-item]


def test_with_overrides_rejects_negative_timeout() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        CommandOptions().with_overrides({"timeout": -1})


@pytest.mark.asyncio
async def test_run_shell_captures_output(tmp_path: Path) -> None:
    result = await run_shell(
        'echo "$GREETING" && pwd -P && echo oops >&2',
        options=CommandOptions(cwd=tmp_path, env={"GREETING": "hello", "PATH": "/usr/bin:/bin"}),
    )

    assert result.ok
    assert result.stdout.splitlines() == ["hello", str(tmp_path.resolve())]
    assert result.stderr.strip() == "oops"
    assert not result.timed_out


@pytest.mark.asyncio
async def test_run_shell_reports_exit_status() -> None:
    result = await run_shell("exit 3")

    assert result.returncode == 3
    assert not result.ok


@pytest.mark.asyncio
async def test_run_shell_timeout_kills_and_aborts() -> None:
    aborted: list[bool] = []
    spawned: list[int] = []

    async def on_abort() -> None:
        aborted.append(True)

    result = await run_shell(
        "sleep 5",
        options=CommandOptions(timeout=0.2),
        on_abort=on_abort,
        on_spawn=lambda process: spawned.append(process.pid),
    )

    assert result.returncode == TIMEOUT_RETURNCODE
    assert result.timed_out
    assert "timed out" in result.stderr
    assert aborted == [True]
    assert len(spawned) == 1



@pytest.mark.asyncio
async def test_run_shell_cancellation_kills_and_aborts() -> None:
    aborted: list[bool] = []
    spawned: list[asyncio.subprocess.Process] = []

    async def on_abort() -> None:
        aborted.append(True)

    task = asyncio.create_task(run_shell("sleep 5", on_abort=on_abort, on_spawn=spawned.append))
    while not spawned:
        await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert aborted == [True]
    assert spawned[0].returncode is not None


@pytest.mark.asyncio
async def test_run_checked_returns_stdout() -> None:
    runner = _StaticRunner(CommandResult(command="ls", returncode=0, stdout="out\n", stderr=""))

    assert await run_checked(runner, "ls", timeout=3.0) == "out\n"
    assert runner.timeouts == [3.0]


@pytest.mark.asyncio
async def test_run_checked_raises_on_failure() -> None:
    runner = _StaticRunner(CommandResult(command="devtool status", returncode=2, stdout="", stderr="no workspace"))

    with pytest.raises(CommandExecutionError) as excinfo:
        await run_checked(runner, "devtool status")

    assert excinfo.value.returncode == 2
    assert "devtool status" in str(excinfo.value)
    assert "no workspace" in str(excinfo.value)
