"""Caches used by the detection engine.

- ``ResultCache``: fixed-TTL keyed store for tool results and system info.
- ``PerformanceCache``: size-bounded, TTL-bounded memoization cache with
  LRU-with-frequency eviction.

Both are plain objects constructed once at application start and injected
where needed; there are no module-level singletons.
"""

from __future__ import annotations

from toolscout.cache.performance import CacheEntry, PerformanceCache, estimate_size
from toolscout.cache.result_cache import (
    SYSTEM_INFO_TTL_SECONDS,
    TOOL_RESULT_TTL_SECONDS,
    ResultCache,
)

__all__ = [
    "CacheEntry",
    "PerformanceCache",
    "ResultCache",
    "SYSTEM_INFO_TTL_SECONDS",
    "TOOL_RESULT_TTL_SECONDS",
    "estimate_size",
]
