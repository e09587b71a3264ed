# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Synchronous publish/subscribe registry keyed by event name."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Final

Listener = Callable[..., Any]


class EventType:
    """Names of the events emitted by a project scanner."""

    SCAN_COMPLETE: Final[str] = "scanComplete"
    START_SCAN: Final[str] = "startScan"
    PARSE_RECIPES: Final[str] = "parseRecipes"


class EventEmitter:
    """Map event names to ordered listener lists.

    Listeners run synchronously in registration order. An exception raised by
    a listener propagates to the emitter's caller and stops the fan-out.
    """

    def __init__(self) -> None:
        """Initialise an empty listener registry."""

        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``event``.

        Args:
            event: Event name.
            listener: Callable invoked with the emitted payload.

        Returns:
            Callable[[], None]: Function removing the registration.
        """

        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        """Remove the first registration of ``listener`` for ``event``."""

        listeners = self._listeners.get(event)
        if not listeners or listener not in listeners:
            return
        listeners.remove(listener)

    def emit(self, event: str, *payload: Any) -> bool:
        """Invoke every listener registered for ``event`` with ``payload``.

        Args:
            event: Event name.
            *payload: Positional arguments forwarded to the listeners.

        Returns:
            bool: ``True`` when at least one listener was invoked.
        """

        listeners = tuple(self._listeners.get(event, ()))
        for listener in listeners:
            listener(*payload)
        return bool(listeners)

    def listener_count(self, event: str) -> int:
        """Return how many listeners are registered for ``event``."""

        return len(self._listeners.get(event, ()))


__all__ = ["EventEmitter", "EventType", "Listener"]
