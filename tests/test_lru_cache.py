"""Tests for the shared bounded LRU cache."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.utils import BoundedCache


class TestEviction:
    def test_evicts_least_recently_used(self) -> None:
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3
        assert len(cache) == 2

    def test_get_protects_entry_from_eviction(self) -> None:
        """A read moves the entry to the most-recently-used end."""
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.get("a") == 1

        cache.set("c", 3)

        assert cache.has("a")
        assert not cache.has("b")
        assert list(cache.keys()) == ["a", "c"]

    def test_overwrite_refreshes_without_growing(self) -> None:
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)

        assert cache.get("a") == 10
        assert not cache.has("b")
        assert len(cache) == 2

    def test_has_does_not_promote(self) -> None:
        cache: BoundedCache[str, int] = BoundedCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.has("a")

        cache.set("c", 3)

        assert not cache.has("a")


def test_delete_and_clear() -> None:
    cache: BoundedCache[str, int] = BoundedCache(3)
    cache.set("a", 1)
    cache.set("b", 2)

    assert cache.delete("a") is True
    assert cache.delete("missing") is False
    assert "a" not in cache

    cache.clear()
    assert len(cache) == 0
    assert cache.stats().total_accesses == 0


def test_stats_track_hits_and_misses() -> None:
    cache: BoundedCache[str, int] = BoundedCache(5)
    cache.set("a", 1)
    cache.get("a")
    cache.get("a")
    cache.get("b")
    cache.get("c")

    stats = cache.stats()

    assert stats.size == 1
    assert stats.max_size == 5
    assert stats.hit_count == 2
    assert stats.miss_count == 2
    assert stats.total_accesses == 4
    assert stats.hit_rate == pytest.approx(50.0)
    assert stats.miss_rate == pytest.approx(50.0)


def test_stats_rates_are_zero_before_any_access() -> None:
    stats = BoundedCache(5).stats()

    assert stats.hit_rate == 0.0
    assert stats.miss_rate == 0.0


def test_stats_can_be_disabled() -> None:
    cache: BoundedCache[str, int] = BoundedCache(5, track_stats=False)
    cache.set("a", 1)
    cache.get("a")
    cache.get("b")

    assert cache.stats().total_accesses == 0


def test_key_fn_stores_under_derived_key() -> None:
    cache: BoundedCache[str, str] = BoundedCache(5, key_fn=lambda text: text[:3])
    cache.set("abcdef", "first")

    assert cache.get("abcxyz") == "first"
    assert list(cache.keys()) == ["abc"]


def test_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        BoundedCache(0)


def test_delete_reports_stored_none_values() -> None:
    cache: BoundedCache[str, int | None] = BoundedCache(3)
    cache.set("empty", None)

    assert cache.delete("empty") is True
    assert not cache.has("empty")
    assert cache.delete("empty") is False
