"""Tests for the per-tool TTL result cache."""

from __future__ import annotations

import pytest

from toolscout.cache.result_cache import ResultCache

from tests.fakes import FakeClock


class TestResultCache:

    def test_get_missing(self, clock: FakeClock) -> None:
        assert ResultCache(60, clock=clock).get("git") is None

    def test_set_then_get(self, clock: FakeClock) -> None:
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.set("git", "2.49.0")
        assert cache.get("git") == "2.49.0"
        assert "git" in cache

    def test_valid_until_ttl_boundary(self, clock: FakeClock) -> None:
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.set("git", "2.49.0")
        clock.advance(60)
        assert cache.get("git") == "2.49.0"

    def test_expired_entry_dropped_on_read(self, clock: FakeClock) -> None:
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.set("git", "2.49.0")
        clock.advance(60.5)
        assert len(cache) == 1
        assert cache.get("git") is None
        assert len(cache) == 0

    def test_set_refreshes_timestamp(self, clock: FakeClock) -> None:
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.set("git", "2.48.0")
        clock.advance(50)
        cache.set("git", "2.49.0")
        clock.advance(50)
        assert cache.get("git") == "2.49.0"

    def test_clear_one(self, clock: FakeClock) -> None:
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.set("git", "a")
        cache.set("node", "b")
        cache.clear("git")
        assert cache.get("git") is None
        assert cache.get("node") == "b"

    def test_clear_unknown_is_noop(self, clock: FakeClock) -> None:
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.clear("nothing")
        assert len(cache) == 0

    def test_clear_all(self, clock: FakeClock) -> None:
        cache: ResultCache[str] = ResultCache(60, clock=clock)
        cache.set("git", "a")
        cache.set("node", "b")
        cache.clear()
        assert len(cache) == 0

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_rejected(self, ttl: float) -> None:
        with pytest.raises(ValueError):
            ResultCache(ttl)
