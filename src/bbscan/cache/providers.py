# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Key/value stores backing the persisted scan results."""

from __future__ import annotations

import json
import logging
import re
import time
from pathlib import Path
from threading import RLock
from typing import Any, Generic, TypeVar

from ..interfaces import CacheProvider

LOGGER = logging.getLogger(__name__)

ValueT = TypeVar("ValueT")

_UNSAFE_KEY_CHARS = re.compile(r"[^\w.-]")


class InMemoryCacheProvider(CacheProvider[ValueT], Generic[ValueT]):
    """Keep cached values in a dictionary for the lifetime of the process."""

    def __init__(self) -> None:
        self._store: dict[str, tuple[float | None, ValueT]] = {}
        self._lock = RLock()

    def get(self, key: str) -> ValueT | None:
        """Return the value stored for ``key`` unless it expired."""

        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at is not None and expires_at < time.monotonic():
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: ValueT, *, ttl_seconds: float | None = None) -> None:
        """Store ``value`` for ``key`` with an optional TTL."""

        expires_at = time.monotonic() + ttl_seconds if ttl_seconds is not None else None
        with self._lock:
            self._store[key] = (expires_at, value)

    def delete(self, key: str) -> None:
        """Remove the value stored for ``key``."""

        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        """Remove every stored value."""

        with self._lock:
            self._store.clear()


class DirectoryCacheProvider(CacheProvider[Any]):
    """Persist JSON values as one file per key below ``directory``.

    The directory is created on the first write so read-only commands leave no
    trace. TTLs are not persisted.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        """Return the directory holding the cache files."""

        return self._directory

    def get(self, key: str) -> Any | None:
        """Return the decoded JSON payload for ``key`` when readable."""

        path = self._path_for(key)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.debug("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

    def set(self, key: str, value: Any, *, ttl_seconds: float | None = None) -> None:
        """Write ``value`` for ``key`` as JSON, ignoring ``ttl_seconds``."""

        _ = ttl_seconds
        path = self._path_for(key)
        staging = path.with_suffix(".tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            staging.write_text(json.dumps(value, indent=2), encoding="utf-8")
            staging.replace(path)
        except OSError as exc:
            LOGGER.warning("Unable to write cache entry %s: %s", path, exc)
            return

    def delete(self, key: str) -> None:
        """Remove the JSON file stored for ``key``."""

        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("Unable to remove cache entry %s: %s", path, exc)
            return

    def clear(self) -> None:
        """Remove every JSON file managed by the provider."""

        if not self._directory.is_dir():
            return
        for child in self._directory.glob("*.json"):
            try:
                child.unlink(missing_ok=True)
            except OSError as exc:
                LOGGER.warning("Unable to remove cache entry %s: %s", child, exc)
                continue

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"


__all__ = ["DirectoryCacheProvider", "InMemoryCacheProvider"]
