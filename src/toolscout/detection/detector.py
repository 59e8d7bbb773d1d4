"""Detection orchestrator: scans registered tools category by category.

Scan Lifecycle:
    ``idle -> detecting-system-info -> scanning-categories -> aggregating
    -> complete``, or ``error`` when an unexpected exception escapes.

    1. Resolve ``SystemInfo`` (TTL cached) before any category runs,
       because strategy selection depends on the platform.
    2. Pick categories (all registered ones by default) and apply the
       configured include/exclude filters.
    3. Scan categories either in parallel through ``BatchProcessor``
       (bounded by ``max_concurrency``) or sequentially.
    4. Within a category, probe every rule in declaration order. Each probe
       consults the result cache first. A probe that raises is converted
       into a ``found=False`` result carrying the message, so one tool
       never aborts its category.
    5. Aggregate per-category and global summaries into a new
       ``DetectionReport``. Results served from the cache carry
       ``metadata["cached"]`` and are counted in ``summary.cache_hits``;
       tools that raised or had no strategy for the host are listed in
       ``report.errors``.

Failure Semantics:
    Probe failures are data. Anything that escapes category processing is
    reported through a ``DetectionFailed`` event and re-raised unchanged.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum

from toolscout.cache.result_cache import ResultCache
from toolscout.concurrency import BatchProcessor
from toolscout.config import DetectionConfig
from toolscout.detection.events import (
    CategoryCompleted,
    CategoryStarted,
    DetectionCompleted,
    DetectionEvent,
    DetectionFailed,
    DetectionStarted,
    EventCallback,
    ToolDetected,
)
from toolscout.detection.executor import AsyncCommandRunner, CommandRunner
from toolscout.detection.models import (
    CategoryReport,
    CategorySummary,
    DetectionMethod,
    DetectionReport,
    DetectionRule,
    DetectionSummary,
    Progress,
    SystemInfo,
    ToolDetectionResult,
)
from toolscout.detection.probes import run_probe
from toolscout.detection.resolver import resolve_strategy
from toolscout.detection.rules import RuleRegistry, default_rules
from toolscout.detection.system_info import SystemInfoProvider
from toolscout.exceptions import DetectionInProgressError, NoStrategyForPlatformError

logger = logging.getLogger(__name__)


class DetectionState(str, Enum):
    IDLE = "idle"
    DETECTING_SYSTEM_INFO = "detecting-system-info"
    SCANNING_CATEGORIES = "scanning-categories"
    AGGREGATING = "aggregating"
    COMPLETE = "complete"
    ERROR = "error"


def summarize_category(
    results: list[ToolDetectionResult], rules: tuple[DetectionRule, ...]
) -> CategorySummary:
    """Count found and essential tools for one category."""
    essential_names = {rule.name for rule in rules if rule.essential}
    essential_found = sum(1 for r in results if r.found and r.name in essential_names)
    return CategorySummary(
        total_checked=len(results),
        found=sum(1 for r in results if r.found),
        essential_found=essential_found,
        essential_missing=len(essential_names) - essential_found,
    )


def summarize_report(
    categories: list[CategoryReport], detection_time_ms: float
) -> DetectionSummary:
    """Aggregate category summaries; the success rate is 0 when nothing ran."""
    total_found = sum(c.summary.found for c in categories)
    total_checked = sum(c.summary.total_checked for c in categories)
    cache_hits = sum(
        1 for c in categories for tool in c.tools if tool.metadata.get("cached")
    )
    success_rate = total_found / total_checked * 100 if total_checked > 0 else 0.0
    return DetectionSummary(
        total_found=total_found,
        total_checked=total_checked,
        success_rate=success_rate,
        detection_time_ms=detection_time_ms,
        cache_hits=cache_hits,
    )


class SystemDetector:
    """Owns the rule registry and drives tool detection scans.

    All collaborators are injected; defaults are constructed when omitted.

    Usage::

        detector = SystemDetector(DetectionConfig(parallel=False))
        report = asyncio.run(detector.detect_tools(["version-control"]))
        for category in report.categories:
            print(category.category, category.summary.found)

    Args:
        config: Scan options. Defaults to ``DetectionConfig()``.
        rules: Rule registry (category -> rules). Defaults to the
            built-in rules.
        runner: Command execution adapter for command probes.
        result_cache: Per-tool result cache. Defaults to a cache with the
            configured ``cache_duration_seconds``.
        system_info_provider: Cached host information source.
        on_event: Callback receiving every lifecycle event.
    """

    def __init__(
        self,
        config: DetectionConfig | None = None,
        rules: RuleRegistry | None = None,
        runner: CommandRunner | None = None,
        result_cache: ResultCache[ToolDetectionResult] | None = None,
        system_info_provider: SystemInfoProvider | None = None,
        on_event: EventCallback | None = None,
    ) -> None:
        self._config = config or DetectionConfig()
        self._rules: RuleRegistry = dict(rules) if rules is not None else default_rules()
        self._runner = runner or AsyncCommandRunner()
        self._cache = result_cache or ResultCache(self._config.cache_duration_seconds)
        self._system_info = system_info_provider or SystemInfoProvider()
        self._on_event = on_event
        self._state = DetectionState.IDLE
        self._scanning = False

    # -- registry access ----------------------------------------------------

    @property
    def config(self) -> DetectionConfig:
        return self._config

    @property
    def state(self) -> DetectionState:
        return self._state

    @property
    def categories(self) -> list[str]:
        return list(self._rules)

    def rules_for(self, category: str) -> tuple[DetectionRule, ...]:
        return self._rules.get(category, ())

    def find_rule(self, name: str) -> DetectionRule | None:
        for rules in self._rules.values():
            for rule in rules:
                if rule.name == name:
                    return rule
        return None

    # -- public operations --------------------------------------------------

    async def detect_system_info(self) -> SystemInfo:
        return self._system_info.get()

    def clear_cache(self, tool_id: str | None = None) -> None:
        """Forget one cached tool result, or all of them."""
        self._cache.clear(tool_id)
        logger.debug("Cleared result cache (%s)", tool_id or "all")

    async def detect_tool(self, name: str) -> ToolDetectionResult:
        """Detect a single tool by rule name."""
        rule = self.find_rule(name)
        if rule is None:
            return ToolDetectionResult.not_found(
                name, DetectionMethod.COMMAND,
                error=f"No detection rule found for tool: {name}",
            )
        system_info = await self.detect_system_info()
        return await self._probe_rule(rule, system_info)

    async def detect_tools(
        self,
        categories: list[str] | None = None,
        on_event: EventCallback | None = None,
    ) -> DetectionReport:
        """Scan categories and return a fresh ``DetectionReport``.

        Args:
            categories: Categories to scan; all registered ones if ``None``.
            on_event: Extra callback for this scan only, called after the
                detector-wide callback.

        Raises:
            DetectionInProgressError: A scan is already running on this
                detector.
            Exception: Any unexpected error escaping category processing,
                after a ``DetectionFailed`` event was emitted.
        """
        if self._scanning:
            raise DetectionInProgressError("A detection scan is already running")
        self._scanning = True
        try:
            return await self._run_scan(categories, on_event)
        finally:
            self._scanning = False

    # -- scan internals -----------------------------------------------------

    def _emitter(self, extra: EventCallback | None) -> EventCallback:
        callbacks = [cb for cb in (self._on_event, extra) if cb is not None]

        def emit(event: DetectionEvent) -> None:
            for callback in callbacks:
                callback(event)

        return emit

    async def _run_scan(
        self, categories: list[str] | None, on_event: EventCallback | None
    ) -> DetectionReport:
        emit = self._emitter(on_event)
        started = time.perf_counter()

        self._state = DetectionState.DETECTING_SYSTEM_INFO
        try:
            system_info = await self.detect_system_info()
        except Exception:
            self._state = DetectionState.ERROR
            raise

        requested = list(categories) if categories is not None else self.categories
        selected = self._config.filter_categories(requested)
        progress = Progress(
            total_categories=len(selected),
            total_tools=sum(len(self.rules_for(c)) for c in selected),
        )
        logger.info(
            "Starting detection of %d tools in %d categories on %s",
            progress.total_tools, progress.total_categories, system_info.platform.value,
        )
        emit(DetectionStarted(progress=progress.snapshot()))
        errors: list[str] = []

        try:
            self._state = DetectionState.SCANNING_CATEGORIES
            if self._config.parallel:
                reports = await self._scan_parallel(selected, progress, system_info, emit, errors)
            else:
                reports = await self._scan_sequential(selected, progress, system_info, emit, errors)

            self._state = DetectionState.AGGREGATING
            elapsed_ms = (time.perf_counter() - started) * 1000
            report = DetectionReport(
                system_info=system_info,
                timestamp=datetime.now(timezone.utc),
                categories=tuple(reports),
                summary=summarize_report(reports, elapsed_ms),
                errors=tuple(errors),
            )
            emit(DetectionCompleted(report=report))
        except Exception as exc:
            self._state = DetectionState.ERROR
            logger.error("Detection failed: %s", exc)
            emit(DetectionFailed(error=exc, context="System detection process"))
            raise

        self._state = DetectionState.COMPLETE
        logger.info(
            "Detection complete: %d/%d tools found in %.0fms",
            report.summary.total_found, report.summary.total_checked,
            report.summary.detection_time_ms,
        )
        return report

    async def _scan_sequential(
        self,
        categories: list[str],
        progress: Progress,
        system_info: SystemInfo,
        emit: EventCallback,
        errors: list[str],
    ) -> list[CategoryReport]:
        reports: list[CategoryReport] = []
        for category in categories:
            report = await self._process_category(category, progress, system_info, emit, errors)
            reports.append(report)
            progress.categories_completed += 1
            emit(CategoryCompleted(category=category, result=report, progress=progress.snapshot()))
        return reports

    async def _scan_parallel(
        self,
        categories: list[str],
        progress: Progress,
        system_info: SystemInfo,
        emit: EventCallback,
        errors: list[str],
    ) -> list[CategoryReport]:
        if not categories:
            return []
        processor = BatchProcessor(
            max_concurrency=min(self._config.max_concurrency, len(categories)),
            enabled=self._config.bounded_concurrency,
        )

        async def scan_one(category: str, _index: int) -> CategoryReport:
            report = await self._process_category(category, progress, system_info, emit, errors)
            progress.categories_completed += 1
            emit(CategoryCompleted(category=category, result=report, progress=progress.snapshot()))
            return report

        return await processor.process_in_parallel(categories, scan_one)

    async def _process_category(
        self,
        category: str,
        progress: Progress,
        system_info: SystemInfo,
        emit: EventCallback,
        errors: list[str],
    ) -> CategoryReport:
        progress.current_category = category
        emit(CategoryStarted(category=category, progress=progress.snapshot()))

        rules = self.rules_for(category)
        results: list[ToolDetectionResult] = []
        for rule in rules:
            progress.current_tool = rule.name
            try:
                result = await self._probe_rule(rule, system_info, errors)
            except Exception as exc:
                logger.warning("Detection of %s raised: %s", rule.name, exc, exc_info=True)
                strategy = resolve_strategy(rule, system_info.platform)
                method = strategy.method if strategy is not None else DetectionMethod.COMMAND
                result = ToolDetectionResult.not_found(rule.name, method, error=str(exc))
                errors.append(f"{rule.name}: {exc}")
            results.append(result)
            progress.tools_completed += 1
            emit(ToolDetected(tool=rule.name, result=result, progress=progress.snapshot()))

        return CategoryReport(
            category=category,
            tools=tuple(results),
            summary=summarize_category(results, rules),
        )

    async def _probe_rule(
        self,
        rule: DetectionRule,
        system_info: SystemInfo,
        errors: list[str] | None = None,
    ) -> ToolDetectionResult:
        if self._config.cache_results:
            cached = self._cache.get(rule.name)
            if cached is not None:
                logger.debug("Cache hit for %s", rule.name)
                return replace(cached, metadata={**cached.metadata, "cached": True})

        strategy = resolve_strategy(rule, system_info.platform)
        if strategy is None:
            error = NoStrategyForPlatformError(rule.name, system_info.platform.value)
            if errors is not None:
                errors.append(f"{rule.name}: {error}")
            return ToolDetectionResult.not_found(
                rule.name, DetectionMethod.COMMAND, error=str(error),
            )

        result = await run_probe(rule, strategy, self._runner, self._config.default_timeout_ms)
        if self._config.cache_results:
            self._cache.set(rule.name, result)
        return result
