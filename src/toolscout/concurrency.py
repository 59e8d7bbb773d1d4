"""Bounded-concurrency batch processing for independent coroutines.

``BatchProcessor.process_in_parallel`` splits the input into consecutive
batches of ``max_concurrency`` items and awaits each batch completely
before starting the next, so no more than ``max_concurrency`` units are
ever in flight. Results are returned in input order regardless of which
unit finishes first.

The processor is fail-fast: the first exception raised by any unit
propagates and no partial results are returned. The remaining units of
that batch are cancelled and awaited before the exception is re-raised,
so no unit is still running when the caller sees the failure. Callers
that want fail-soft behaviour must convert failures into result values inside the
unit function itself (the detector does exactly that per tool).
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

MIN_CONCURRENCY = 2
MAX_CONCURRENCY = 8


def default_concurrency() -> int:
    """Logical core count clamped to ``[MIN_CONCURRENCY, MAX_CONCURRENCY]``."""
    cores = os.cpu_count() or MIN_CONCURRENCY
    return max(MIN_CONCURRENCY, min(cores, MAX_CONCURRENCY))


class BatchProcessor:
    """Run async units with a ceiling on how many are in flight.

    Args:
        max_concurrency: Batch size, i.e. the in-flight ceiling. Must be >= 1.
        enabled: When ``False`` all units run at once (unbounded). The
            detector sets this from ``DetectionConfig.bounded_concurrency``.
    """

    def __init__(self, max_concurrency: int = 4, enabled: bool = True) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._max_concurrency = max_concurrency
        self._enabled = enabled

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def process_in_parallel(
        self,
        items: Sequence[T],
        fn: Callable[[T, int], Awaitable[R]],
    ) -> list[R]:
        """Apply ``fn(item, index)`` to every item, preserving order.

        Raises:
            Exception: Whatever the first failing unit raised. Remaining
                units of the same batch are cancelled and awaited; later
                batches never start.
        """
        if not items:
            return []

        results: list[R] = []
        # Disabled: one batch holding every item.
        size = self._max_concurrency if self._enabled else len(items)
        for start in range(0, len(items), size):
            batch = items[start:start + size]
            logger.debug(
                "Processing batch %d-%d of %d", start, start + len(batch) - 1, len(items)
            )
            tasks = [
                asyncio.ensure_future(fn(item, start + offset))
                for offset, item in enumerate(batch)
            ]
            try:
                batch_results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                # Let cancelled siblings unwind (and kill their processes) first.
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            results.extend(batch_results)
        return results
