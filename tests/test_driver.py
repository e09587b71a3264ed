# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for composing and running toolchain commands."""

from __future__ import annotations

import shlex
from pathlib import Path

import pytest

from bbscan.config import BitbakeSettings, BuildConfiguration
from bbscan.driver import CLOSE_EVENT, SPAWN_EVENT, BitbakeDriver, BitbakeTaskDefinition, BitbakeTaskOptions
from bbscan.process_utils import CommandResult


def test_init_script_sources_environment_script() -> None:
    settings = BitbakeSettings(
        path_to_build_folder=Path("/yocto/build"),
        path_to_env_script=Path("/yocto/poky/oe-init-build-env"),
        shell_env={"DISPLAY": ":0", "MACHINE": "qemu x86"},
    )

    script = BitbakeDriver(settings).compose_init_script()

    assert script.splitlines() == [
        "set -e",
        "export DISPLAY=:0",
        "export MACHINE='qemu x86'",
        ". /yocto/poky/oe-init-build-env /yocto/build",
    ]


def test_init_script_without_environment_script_extends_path() -> None:
    settings = BitbakeSettings(
        path_to_bitbake_folder=Path("/yocto/poky/bitbake"),
        path_to_build_folder=Path("/yocto/build"),
        path_to_env_script=None,
    )

    script = BitbakeDriver(settings).compose_init_script()

    assert script.splitlines() == [
        "set -e",
        'export PATH=/yocto/poky/bitbake/bin:"$PATH"',
        "cd /yocto/build",
    ]


def test_active_configuration_overrides_global_settings() -> None:
    settings = BitbakeSettings(
        path_to_build_folder=Path("/yocto/build"),
        build_configurations={"arm": BuildConfiguration(path_to_build_folder=Path("/yocto/build-arm"))},
        active_build_configuration="arm",
    )

    assert BitbakeDriver(settings).compose_init_script().endswith("/yocto/build-arm")


def test_compose_command_uses_wrapper() -> None:
    settings = BitbakeSettings(command_wrapper="docker exec -i builder bash -c")
    driver = BitbakeDriver(settings)

    command = driver.compose_command("bitbake-layers show-layers")

    script = driver.compose_bitbake_script("bitbake-layers show-layers")
    assert command == f"docker exec -i builder bash -c {shlex.quote(script)}"
    assert script.endswith("\nbitbake-layers show-layers")


def test_compose_command_defaults_to_bash() -> None:
    driver = BitbakeDriver(BitbakeSettings())

    assert driver.compose_command("devtool status").startswith("bash -c 'set -e\n")


@pytest.mark.parametrize(
    ("task", "expected"),
    [
        (BitbakeTaskDefinition(recipes=["busybox"], task="compile"), "bitbake busybox -c compile"),
        (
            BitbakeTaskDefinition(
                recipes=["busybox", "zstd"],
                options=BitbakeTaskOptions(continue_=True, force=True),
            ),
            "bitbake busybox zstd -k -f",
        ),
        (
            BitbakeTaskDefinition.model_validate({"options": {"parseOnly": True, "continue": True}}),
            "bitbake -k -p",
        ),
        (BitbakeTaskDefinition(special_command="bitbake-layers show-layers"), "bitbake-layers show-layers"),
    ],
)
def test_compose_bitbake_command(task: BitbakeTaskDefinition, expected: str) -> None:
    assert BitbakeDriver.compose_bitbake_command(task) == expected


@pytest.mark.asyncio
async def test_execute_runs_in_build_folder(tmp_path: Path) -> None:
    build = tmp_path / "build"
    build.mkdir()
    settings = BitbakeSettings(
        path_to_bitbake_folder=tmp_path / "bitbake",
        path_to_build_folder=build,
        path_to_env_script=None,
        working_directory=tmp_path,
    )
    driver = BitbakeDriver(settings)
    events: list[tuple[str, object]] = []
    driver.on_process_change.on(SPAWN_EVENT, lambda command: events.append((SPAWN_EVENT, command)))
    driver.on_process_change.on(CLOSE_EVENT, lambda result: events.append((CLOSE_EVENT, result)))

    result = await driver.execute("pwd -P")

    assert result.ok
    assert result.command == "pwd -P"
    assert result.stdout.strip() == str(build.resolve())
    assert events[0] == (SPAWN_EVENT, "pwd -P")
    assert events[1][0] == CLOSE_EVENT
    assert isinstance(events[1][1], CommandResult)


@pytest.mark.asyncio
async def test_execute_timeout_kills_command(tmp_path: Path) -> None:
    settings = BitbakeSettings(path_to_build_folder=tmp_path, path_to_env_script=None, working_directory=tmp_path)
    driver = BitbakeDriver(settings)

    result = await driver.execute("sleep 5", timeout=0.2)

    assert result.timed_out
    assert result.command == "sleep 5"


@pytest.mark.asyncio
async def test_execute_rejects_negative_timeout(tmp_path: Path) -> None:
    settings = BitbakeSettings(path_to_build_folder=tmp_path, path_to_env_script=None, working_directory=tmp_path)
    driver = BitbakeDriver(settings)
    spawned: list[str] = []
    driver.on_process_change.on(SPAWN_EVENT, spawned.append)

    with pytest.raises(ValueError, match="non-negative"):
        await driver.execute("true", timeout=-1)

    assert spawned == []
