"""Size-bounded, TTL-bounded cache for memoizing expensive computations.

Eviction Policy:
    Entries expire lazily on read once older than the TTL. Independently,
    whenever the estimated total size exceeds ``max_size_bytes``, entries
    are ranked ascending by the composite score::

        score = last_access + access_count * FREQUENCY_WEIGHT

    and removed lowest-score first until the total size is at most
    ``EVICTION_TARGET_RATIO`` (70%) of the maximum. This is not pure LRU:
    each recorded access is worth ``FREQUENCY_WEIGHT`` seconds of recency,
    so a frequently reused entry outlives a slightly more recent one that
    was touched only once.

Size Estimation:
    ``len(json.dumps(value)) * 2`` bytes, or 1024 for values that cannot be
    serialized. This is an approximation only.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_SIZE_BYTES = 50 * 1024 * 1024
DEFAULT_TTL_SECONDS: float = 30 * 60
# One access is worth one second of recency (1000 ms in the millisecond model).
FREQUENCY_WEIGHT: float = 1.0
EVICTION_TARGET_RATIO = 0.7
UNSERIALIZABLE_SIZE = 1024


@dataclass
class CacheEntry(Generic[T]):
    """A cached value plus its access bookkeeping. Owned by its cache."""

    value: T
    created_at: float
    last_access: float
    access_count: int
    size: int

    @property
    def score(self) -> float:
        return self.last_access + self.access_count * FREQUENCY_WEIGHT


def estimate_size(value: Any) -> int:
    """Approximate the serialized size of ``value`` in bytes."""
    try:
        return len(json.dumps(value)) * 2
    except (TypeError, ValueError):
        return UNSERIALIZABLE_SIZE


class PerformanceCache(Generic[T]):
    """Bounded cache with TTL expiry and LRU-with-frequency eviction.

    Args:
        max_size_bytes: Estimated size above which eviction runs.
        ttl_seconds: Entry lifetime measured from ``set``.
        enabled: When ``False`` every ``get`` misses and ``set`` is a no-op.
        clock: Time source in seconds (injectable for tests).
    """

    def __init__(
        self,
        max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size_bytes <= 0:
            raise ValueError(f"max_size_bytes must be positive, got {max_size_bytes}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._max_size = max_size_bytes
        self._ttl = ttl_seconds
        self._enabled = enabled
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._total_size = 0
        self._hits = 0
        self._misses = 0

    # -- read / write -------------------------------------------------------

    def get(self, key: str) -> T | None:
        entry = self._lookup(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: T) -> None:
        if not self._enabled:
            return
        if key in self._entries:
            self._remove(key)

        now = self._clock()
        size = estimate_size(value)
        self._entries[key] = CacheEntry(
            value=value, created_at=now, last_access=now, access_count=1, size=size,
        )
        self._total_size += size
        self._evict_if_needed()

    def delete(self, key: str) -> bool:
        if key not in self._entries:
            return False
        self._remove(key)
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._total_size = 0
        self._hits = 0
        self._misses = 0

    async def memoize(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key`` or compute, store and return it.

        A cached ``None`` counts as a hit. Exceptions raised by ``factory``
        propagate and nothing is cached.
        """
        entry = self._lookup(key)
        if entry is not None:
            return entry.value
        value = await factory()
        self.set(key, value)
        return value

    # -- statistics ---------------------------------------------------------

    @property
    def size(self) -> int:
        """Estimated total size of all entries in bytes."""
        return self._total_size

    @property
    def max_size(self) -> int:
        return self._max_size

    def hit_rate(self) -> float:
        total = self._hits + self._misses
        return self._hits / total if total > 0 else 0.0

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    # -- internals ----------------------------------------------------------

    def _lookup(self, key: str) -> CacheEntry[T] | None:
        """Return the live entry for ``key`` with hit/miss bookkeeping."""
        if not self._enabled:
            return None
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        now = self._clock()
        if now - entry.created_at > self._ttl:
            self._remove(key)
            self._misses += 1
            return None

        entry.access_count += 1
        entry.last_access = now
        self._hits += 1
        return entry

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key)
        self._total_size -= entry.size

    def _evict_if_needed(self) -> None:
        if self._total_size <= self._max_size:
            return

        target = self._max_size * EVICTION_TARGET_RATIO
        ranked = sorted(self._entries.items(), key=lambda item: item[1].score)
        evicted = 0
        for key, _entry in ranked:
            if self._total_size <= target:
                break
            self._remove(key)
            evicted += 1
        logger.debug(
            "Evicted %d cache entries, size now %d/%d bytes",
            evicted, self._total_size, self._max_size,
        )
