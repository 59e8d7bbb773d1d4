"""Typed lifecycle events emitted by ``SystemDetector`` during a scan.

Consumers pass a callback (``on_event``) that receives each event in
emission order. Within a category, ``ToolDetected`` events follow rule
declaration order; across categories in parallel mode the interleaving
follows completion order. Every event carries a ``Progress`` snapshot
rather than the live counters.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar, Union

from toolscout.detection.models import (
    CategoryReport,
    DetectionReport,
    Progress,
    ToolDetectionResult,
)


@dataclass(frozen=True)
class DetectionStarted:
    kind: ClassVar[str] = "detection-started"
    progress: Progress


@dataclass(frozen=True)
class CategoryStarted:
    kind: ClassVar[str] = "category-started"
    category: str
    progress: Progress


@dataclass(frozen=True)
class ToolDetected:
    kind: ClassVar[str] = "tool-detected"
    tool: str
    result: ToolDetectionResult
    progress: Progress


@dataclass(frozen=True)
class CategoryCompleted:
    kind: ClassVar[str] = "category-completed"
    category: str
    result: CategoryReport
    progress: Progress


@dataclass(frozen=True)
class DetectionCompleted:
    kind: ClassVar[str] = "detection-completed"
    report: DetectionReport


@dataclass(frozen=True)
class DetectionFailed:
    """Emitted when an unexpected error escapes category processing."""

    kind: ClassVar[str] = "detection-error"
    error: BaseException
    context: str


DetectionEvent = Union[
    DetectionStarted,
    CategoryStarted,
    ToolDetected,
    CategoryCompleted,
    DetectionCompleted,
    DetectionFailed,
]

EventCallback = Callable[[DetectionEvent], None]
