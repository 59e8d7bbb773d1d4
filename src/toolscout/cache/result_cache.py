"""Time-to-live cache for per-tool detection results.

Trades memory for avoided process spawns: tool installation status rarely
changes within a session. Expiry is checked lazily on read (no background
sweep); an expired entry behaves as absent and is dropped on that read.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOOL_RESULT_TTL_SECONDS: float = 5 * 60
SYSTEM_INFO_TTL_SECONDS: float = 30 * 60


@dataclass(frozen=True)
class _TimedValue(Generic[T]):
    value: T
    created_at: float


class ResultCache(Generic[T]):
    """Keyed TTL store mapping tool identifier to its last result.

    Args:
        ttl_seconds: Lifetime of an entry after ``set``.
        clock: Monotonic time source in seconds (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: float = TOOL_RESULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"TTL must be positive, got {ttl_seconds}")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _TimedValue[T]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, tool_id: str) -> T | None:
        """Return the cached value, or ``None`` if absent or expired."""
        entry = self._entries.get(tool_id)
        if entry is None:
            return None
        if self._clock() > entry.created_at + self._ttl:
            del self._entries[tool_id]
            logger.debug("Cache entry expired: %s", tool_id)
            return None
        return entry.value

    def set(self, tool_id: str, value: T) -> None:
        self._entries[tool_id] = _TimedValue(value=value, created_at=self._clock())

    def clear(self, tool_id: str | None = None) -> None:
        """Remove one entry, or every entry when ``tool_id`` is ``None``."""
        if tool_id is None:
            self._entries.clear()
        else:
            self._entries.pop(tool_id, None)

    def __contains__(self, tool_id: object) -> bool:
        return isinstance(tool_id, str) and self.get(tool_id) is not None

    def __len__(self) -> int:
        return len(self._entries)
