# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for cache providers and the versioned scan result store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from bbscan.cache import (
    SCAN_RESULT_VERSION_KEY,
    SCAN_RESULTS_KEY,
    DirectoryCacheProvider,
    InMemoryCacheProvider,
    ScanResultStore,
)
from bbscan.models import SCAN_RESULT_VERSION, BitbakeScanResult, ElementInfo, LayerInfo, ParsedPath


def _sample_result() -> BitbakeScanResult:
    layer = LayerInfo(name="core", path="/yocto/poky/meta", priority=5)
    return BitbakeScanResult(
        layers=[layer],
        recipes=[
            ElementInfo(
                name="busybox",
                path=ParsedPath.from_path("/yocto/poky/meta/recipes-core/busybox/busybox_1.36.1.bb"),
                extra_info="layer: meta\nversion: 1.36.1",
                layer_info=layer,
                version="1.36.1",
                appends=[ParsedPath.from_path("/yocto/meta-custom/busybox_%.bbappend")],
            ),
        ],
        overrides=["linux", "qemuall"],
        bitbake_version="2.8.0",
    )


def test_in_memory_provider_expires_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    now = [100.0]
    monkeypatch.setattr("bbscan.cache.providers.time.monotonic", lambda: now[0])
    provider: InMemoryCacheProvider[str] = InMemoryCacheProvider()

    provider.set("key", "value", ttl_seconds=1.0)
    now[0] = 100.5
    assert provider.get("key") == "value"
    now[0] = 102.0
    assert provider.get("key") is None


def test_in_memory_provider_delete_and_clear() -> None:
    provider: InMemoryCacheProvider[int] = InMemoryCacheProvider()
    provider.set("a", 1)
    provider.set("b", 2)

    provider.delete("a")
    assert provider.get("a") is None
    assert provider.get("b") == 2

    provider.clear()
    assert provider.get("b") is None


def test_directory_provider_round_trip(tmp_path: Path) -> None:
    cache_dir = tmp_path / "cache"
    provider = DirectoryCacheProvider(cache_dir)

    assert provider.get(SCAN_RESULTS_KEY) is None
    assert not cache_dir.exists()

    provider.set(SCAN_RESULTS_KEY, {"configuration": {"_layers": []}})

    assert provider.get(SCAN_RESULTS_KEY) == {"configuration": {"_layers": []}}
    assert (cache_dir / "bitbake.ScanResults.json").is_file()
    assert not list(cache_dir.glob("*.tmp"))


def test_directory_provider_ignores_corrupt_files(tmp_path: Path) -> None:
    provider = DirectoryCacheProvider(tmp_path)
    (tmp_path / "bitbake.ScanResults.json").write_text("{not json", encoding="utf-8")

    assert provider.get(SCAN_RESULTS_KEY) is None


def test_directory_provider_clear_removes_entries(tmp_path: Path) -> None:
    provider = DirectoryCacheProvider(tmp_path / "cache")
    provider.clear()
    provider.set("one", 1)
    provider.set("two/2", 2)

    provider.delete("one")
    assert provider.get("one") is None
    assert provider.get("two/2") == 2

    provider.clear()
    assert provider.get("two/2") is None


def test_directory_provider_logs_unwritable_directory(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    provider = DirectoryCacheProvider(blocker / "cache")

    with caplog.at_level(logging.WARNING, logger="bbscan.cache"):
        provider.set("one", 1)

    assert provider.get("one") is None
    assert "Unable to write cache entry" in caplog.text


def test_store_round_trip_uses_wire_names(tmp_path: Path) -> None:
    provider = DirectoryCacheProvider(tmp_path)
    store = ScanResultStore(provider)

    store.save({"qemux86-64": _sample_result()})

    raw = json.loads((tmp_path / "bitbake.ScanResults.json").read_text(encoding="utf-8"))
    assert raw["qemux86-64"]["_bitbakeVersion"] == "2.8.0"
    assert raw["qemux86-64"]["_recipes"][0]["layerInfo"]["name"] == "core"
    assert provider.get(SCAN_RESULT_VERSION_KEY) == SCAN_RESULT_VERSION

    restored = store.load()

    assert restored is not None
    assert restored["qemux86-64"].model_dump() == _sample_result().model_dump()


def test_store_rejects_stale_version() -> None:
    provider: InMemoryCacheProvider[object] = InMemoryCacheProvider()
    store = ScanResultStore(provider)
    store.save({"default": _sample_result()})
    provider.set(SCAN_RESULT_VERSION_KEY, SCAN_RESULT_VERSION - 1)

    assert store.load() is None


def test_store_rejects_missing_payload() -> None:
    provider: InMemoryCacheProvider[object] = InMemoryCacheProvider()
    provider.set(SCAN_RESULT_VERSION_KEY, SCAN_RESULT_VERSION)

    assert ScanResultStore(provider).load() is None


def test_store_rejects_invalid_payload() -> None:
    provider: InMemoryCacheProvider[object] = InMemoryCacheProvider()
    provider.set(SCAN_RESULTS_KEY, {"default": {"_layers": [{"name": "core"}]}})
    provider.set(SCAN_RESULT_VERSION_KEY, SCAN_RESULT_VERSION)

    assert ScanResultStore(provider).load() is None
