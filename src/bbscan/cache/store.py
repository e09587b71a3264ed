# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Versioned persistence of scan results keyed by build configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Final

from pydantic import TypeAdapter, ValidationError

from ..interfaces import CacheProvider
from ..models import SCAN_RESULT_VERSION, BitbakeScanResult

LOGGER = logging.getLogger(__name__)

SCAN_RESULTS_KEY: Final[str] = "bitbake.ScanResults"
SCAN_RESULT_VERSION_KEY: Final[str] = "bitbake.ScanResultVersion"

_RESULTS_ADAPTER: Final[TypeAdapter[dict[str, BitbakeScanResult]]] = TypeAdapter(dict[str, BitbakeScanResult])


class ScanResultStore:
    """Save and restore the per-configuration scan results through a cache provider."""

    def __init__(self, provider: CacheProvider[Any]) -> None:
        self._provider = provider

    def save(self, results: Mapping[str, BitbakeScanResult]) -> None:
        """Persist ``results`` and the current format version.

        Args:
            results: Scan results keyed by build configuration name.
        """

        payload = {name: result.model_dump(mode="json", by_alias=True) for name, result in results.items()}
        self._provider.set(SCAN_RESULTS_KEY, payload)
        LOGGER.debug("BitBake scan result saved to cache")
        self._provider.set(SCAN_RESULT_VERSION_KEY, SCAN_RESULT_VERSION)
        LOGGER.debug("BitBake scan result version saved to cache")

    def load(self) -> dict[str, BitbakeScanResult] | None:
        """Return the persisted results when they match the current format.

        Returns:
            dict[str, BitbakeScanResult] | None: Results keyed by build
            configuration, ``None`` when missing, stale or invalid.
        """

        payload = self._provider.get(SCAN_RESULTS_KEY)
        version = self._provider.get(SCAN_RESULT_VERSION_KEY)
        if payload is None or version != SCAN_RESULT_VERSION:
            LOGGER.debug("No valid BitBake scan result found in cache: %s != %s", version, SCAN_RESULT_VERSION)
            return None
        try:
            results = _RESULTS_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            LOGGER.debug("Discarding invalid cached scan result: %s", exc)
            return None
        LOGGER.debug("BitBake scan result restored from cache")
        return results


__all__ = ["SCAN_RESULTS_KEY", "SCAN_RESULT_VERSION_KEY", "ScanResultStore"]
