# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cache providers and the scan result store."""

from __future__ import annotations

from .providers import DirectoryCacheProvider, InMemoryCacheProvider
from .store import SCAN_RESULT_VERSION_KEY, SCAN_RESULTS_KEY, ScanResultStore

__all__ = [
    "SCAN_RESULTS_KEY",
    "SCAN_RESULT_VERSION_KEY",
    "DirectoryCacheProvider",
    "InMemoryCacheProvider",
    "ScanResultStore",
]
