# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Contracts for the collaborators consumed by the project scanner."""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar, runtime_checkable

ValueT = TypeVar("ValueT")

if TYPE_CHECKING:
    from bbscan.config import BitbakeSettings
    from bbscan.process_utils import CommandResult


@runtime_checkable
class CommandRunner(Protocol):
    """Execute toolchain commands inside the configured build environment."""

    @abstractmethod
    async def execute(self, command: str, *, timeout: float | None = None) -> CommandResult:
        """Run ``command`` and return its exit status and output.

        Args:
            command: Command text, for example ``bitbake-layers show-layers``.
            timeout: Optional timeout in seconds; ``None`` uses the runner default.

        Returns:
            CommandResult: Exit status and captured streams.
        """
        raise NotImplementedError

    @abstractmethod
    async def kill_bitbake(self) -> None:
        """Abort any toolchain process still running on behalf of the runner."""
        raise NotImplementedError


@runtime_checkable
class ScanDriver(CommandRunner, Protocol):
    """Command runner aware of the build configurations of a project."""

    @property
    @abstractmethod
    def settings(self) -> BitbakeSettings:
        """Return the settings the driver was created with."""
        raise NotImplementedError

    @property
    @abstractmethod
    def active_build_configuration(self) -> str:
        """Return the identifier of the selected build configuration."""
        raise NotImplementedError

    @abstractmethod
    def working_directory(self) -> Path:
        """Return the host working directory of the active build configuration."""
        raise NotImplementedError


class CacheProvider(Protocol, Generic[ValueT]):
    """Define the contract implemented by cache backends.

    Values persisted by long-lived providers must be JSON-serialisable so
    directory caches can round-trip data.
    """

    @abstractmethod
    def get(self, key: str) -> ValueT | None:
        """Fetch the cached value associated with ``key`` when present.

        Args:
            key: Unique identifier representing the cached entry.

        Returns:
            ValueT | None: Cached value when present and valid, otherwise ``None``.
        """
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: ValueT, *, ttl_seconds: float | None = None) -> None:
        """Store ``value`` under ``key`` with an optional TTL expressed in seconds.

        Args:
            key: Unique identifier representing the cached entry.
            value: Value to store under ``key``.
            ttl_seconds: Optional time-to-live in seconds; ``None`` disables expiry.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove any cached value associated with ``key``."""
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        """Remove all cached values managed by the provider."""
        raise NotImplementedError


__all__ = ["CacheProvider", "CommandRunner", "ScanDriver"]
