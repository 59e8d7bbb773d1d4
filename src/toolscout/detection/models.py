"""Data models for tool detection.

Contains the static rule types (``DetectionRule`` and the closed set of
``DetectionStrategy`` variants), host ``SystemInfo``, per-probe
``ToolDetectionResult`` records, the aggregate report types, and the
mutable ``Progress`` counters owned by a single scan.

Everything except ``Progress`` is frozen: a result or report is never
updated in place, the next probe or scan produces a new object.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Platform(str, Enum):
    """Host operating systems a strategy can target."""

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"


class Architecture(str, Enum):
    """CPU architectures reported in ``SystemInfo``."""

    X64 = "x64"
    X86 = "x86"
    ARM64 = "arm64"
    ARM = "arm"


class DetectionMethod(str, Enum):
    """How a tool was (or would be) probed."""

    COMMAND = "command"
    APPLICATION_FOLDER = "application-folder"
    FILESYSTEM = "filesystem"
    ENVIRONMENT_VARIABLE = "environment-variable"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Detection strategies (closed tagged variant)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommandProbe:
    """Run ``command args...`` and read the version from its output.

    Attributes:
        platform: Platform this strategy applies to.
        command: Executable name or path.
        args: Arguments passed to the executable.
        version_regex: Optional pattern tried before the generic extractor.
            Group 1 is used when present, otherwise the whole match.
        timeout_ms: Maximum run time before the process is killed.
            ``None`` means use the detector's default timeout.
    """

    platform: Platform
    command: str
    args: tuple[str, ...] = ("--version",)
    version_regex: str | None = None
    timeout_ms: int | None = None

    @property
    def method(self) -> DetectionMethod:
        return DetectionMethod.COMMAND


@dataclass(frozen=True)
class ApplicationFolderProbe:
    """Check for an installed application bundle or program folder."""

    platform: Platform
    paths: tuple[str, ...]
    timeout_ms: int | None = None

    @property
    def method(self) -> DetectionMethod:
        return DetectionMethod.APPLICATION_FOLDER


@dataclass(frozen=True)
class FilesystemProbe:
    """Check candidate filesystem paths (files or directories)."""

    platform: Platform
    paths: tuple[str, ...]
    version_regex: str | None = None
    timeout_ms: int | None = None

    @property
    def method(self) -> DetectionMethod:
        return DetectionMethod.FILESYSTEM


@dataclass(frozen=True)
class EnvironmentVariableProbe:
    """Consider the tool present when an environment variable is set."""

    platform: Platform
    env_var: str
    timeout_ms: int | None = None

    @property
    def method(self) -> DetectionMethod:
        return DetectionMethod.ENVIRONMENT_VARIABLE


DetectionStrategy = Union[
    CommandProbe, ApplicationFolderProbe, FilesystemProbe, EnvironmentVariableProbe
]

STRATEGY_TYPES: tuple[type, ...] = (
    CommandProbe,
    ApplicationFolderProbe,
    FilesystemProbe,
    EnvironmentVariableProbe,
)


# ---------------------------------------------------------------------------
# Rules and host information
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DetectionRule:
    """Static description of how to detect one tool across platforms.

    Attributes:
        name: Tool name, unique across the registry (e.g. "Node.js").
        category: Category identifier (e.g. "programming-languages").
        strategies: One strategy per supported platform, in lookup order.
        essential: Whether the tool counts toward a category's
            essential-missing total.
    """

    name: str
    category: str
    strategies: tuple[DetectionStrategy, ...]
    essential: bool = False

    def __post_init__(self) -> None:
        if not self.strategies:
            raise ValueError(f"Detection rule {self.name!r} has no strategies")
        for strategy in self.strategies:
            if not isinstance(strategy, STRATEGY_TYPES):
                raise TypeError(
                    f"Unknown detection strategy for {self.name!r}: {strategy!r}"
                )


@dataclass(frozen=True)
class SystemInfo:
    """Host platform description, computed once per TTL window."""

    platform: Platform
    architecture: Architecture
    version: str
    distribution: str | None = None
    distribution_version: str | None = None


# ---------------------------------------------------------------------------
# Results and reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolDetectionResult:
    """Outcome of exactly one probe of one tool.

    A result with ``found=False`` never carries a version; constructing one
    raises ``ValueError``.
    """

    name: str
    found: bool
    detection_method: DetectionMethod
    version: str | None = None
    path: str | None = None
    error: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not self.found and self.version is not None:
            raise ValueError(
                f"Result for {self.name!r} is not found but carries version "
                f"{self.version!r}"
            )

    @classmethod
    def not_found(
        cls, name: str, method: DetectionMethod, error: str | None = None
    ) -> ToolDetectionResult:
        """Build a ``found=False`` result, optionally with an error message."""
        return cls(name=name, found=False, detection_method=method, error=error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "found": self.found,
            "version": self.version,
            "path": self.path,
            "detection_method": self.detection_method.value,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CategorySummary:
    total_checked: int
    found: int
    essential_found: int
    essential_missing: int


@dataclass(frozen=True)
class CategoryReport:
    """Per-category detection results, in rule declaration order."""

    category: str
    tools: tuple[ToolDetectionResult, ...]
    summary: CategorySummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "tools": [tool.to_dict() for tool in self.tools],
            "summary": asdict(self.summary),
        }


@dataclass(frozen=True)
class DetectionSummary:
    total_found: int
    total_checked: int
    success_rate: float
    detection_time_ms: float
    cache_hits: int = 0


@dataclass(frozen=True)
class DetectionReport:
    """Complete, read-only snapshot of one ``detect_tools`` run."""

    system_info: SystemInfo
    timestamp: datetime
    categories: tuple[CategoryReport, ...]
    summary: DetectionSummary
    # "<tool>: <message>" for tools that raised or had no strategy for the host.
    errors: tuple[str, ...] = ()

    @property
    def essential_missing(self) -> int:
        return sum(c.summary.essential_missing for c in self.categories)

    def to_dict(self) -> dict[str, Any]:
        info = self.system_info
        return {
            "system_info": {
                "platform": info.platform.value,
                "architecture": info.architecture.value,
                "version": info.version,
                "distribution": info.distribution,
                "distribution_version": info.distribution_version,
            },
            "timestamp": self.timestamp.isoformat(),
            "categories": [c.to_dict() for c in self.categories],
            "summary": asdict(self.summary),
            "errors": list(self.errors),
        }


# ---------------------------------------------------------------------------
# Progress: the only in-place mutable entity during a scan
# ---------------------------------------------------------------------------


@dataclass
class Progress:
    """Scan-lifetime counters, owned and mutated by one detector scan."""

    total_categories: int
    total_tools: int
    categories_completed: int = 0
    tools_completed: int = 0
    current_category: str | None = None
    current_tool: str | None = None
    start_time: datetime = field(default_factory=_utcnow)

    def snapshot(self) -> Progress:
        """Return a detached copy safe to hand to event consumers."""
        return replace(self)

    @property
    def percent(self) -> float:
        if self.total_tools == 0:
            return 0.0
        return self.tools_completed / self.total_tools * 100
