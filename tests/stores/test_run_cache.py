"""Tests for the run cache store."""

from __future__ import annotations

import pytest

from repodigest.models import ApiSurface, DependencyGraph, Digest, IngestionResult
from repodigest.stores import RunCache


def _result(run_id: str) -> IngestionResult:
    digest = Digest(
        module_count=0,
        central_modules=(),
        endpoint_count=0,
        endpoints_by_method={},
        library_count=0,
        exports_by_kind={},
    )
    return IngestionResult(
        run_id=run_id,
        tree="",
        graph=DependencyGraph(),
        surface=ApiSurface(),
        digest=digest,
    )


def test_run_cache_round_trip() -> None:
    cache = RunCache()
    result = _result("a")

    cache.put(result)

    assert cache.get("a") is result
    assert "a" in cache
    assert len(cache) == 1
    assert cache.get("missing") is None


def test_run_cache_evicts_least_recently_used() -> None:
    cache = RunCache(max_entries=2)
    cache.put(_result("a"))
    cache.put(_result("b"))
    cache.get("a")

    cache.put(_result("c"))

    assert cache.run_ids() == ["a", "c"]
    assert "b" not in cache


def test_run_cache_latest_tracks_access_order() -> None:
    cache = RunCache()
    assert cache.latest() is None

    cache.put(_result("a"))
    cache.put(_result("b"))
    cache.get("a")

    latest = cache.latest()
    assert latest is not None
    assert latest.run_id == "a"


def test_run_cache_invalidate_and_clear() -> None:
    cache = RunCache()
    cache.put(_result("a"))
    cache.put(_result("b"))

    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    assert cache.run_ids() == ["b"]

    cache.clear()
    assert len(cache) == 0


def test_run_cache_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        RunCache(max_entries=0)
