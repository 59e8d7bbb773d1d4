"""Property-based tests for PerformanceCache size accounting.

After any sequence of writes, deletes and reads the tracked size equals
the sum of the live entries' sizes and never exceeds the configured
maximum.
"""
from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from toolscout.cache.performance import PerformanceCache, estimate_size

from tests.fakes import FakeClock


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

keys = st.sampled_from(["git", "node", "python", "docker", "go", "rust"])
values = st.text(max_size=80)
operations = st.lists(
    st.one_of(
        st.tuples(st.just("set"), keys, values),
        st.tuples(st.just("get"), keys, st.none()),
        st.tuples(st.just("delete"), keys, st.none()),
    ),
    max_size=50,
)
max_sizes = st.integers(min_value=50, max_value=600)


class TestCacheProperties:
    """Size invariants under arbitrary operation sequences."""

    @settings(max_examples=80, deadline=None)
    @given(ops=operations, max_size=max_sizes)
    def test_size_bounded_and_consistent(self, ops, max_size: int) -> None:
        clock = FakeClock()
        cache: PerformanceCache[str] = PerformanceCache(max_size_bytes=max_size, clock=clock)
        shadow: dict[str, str] = {}

        for op, key, value in ops:
            clock.advance(0.5)
            if op == "set":
                cache.set(key, value)
                shadow[key] = value
            elif op == "get":
                cache.get(key)
            else:
                cache.delete(key)
            assert cache.size <= max_size

        expected = sum(estimate_size(shadow[k]) for k in cache.keys())
        assert cache.size == expected

    @settings(max_examples=50, deadline=None)
    @given(value=values)
    def test_hit_after_set(self, value: str) -> None:
        """A value that fits is readable immediately after ``set``."""
        cache: PerformanceCache[str] = PerformanceCache(clock=FakeClock())
        cache.set("k", value)
        assert cache.get("k") == value
