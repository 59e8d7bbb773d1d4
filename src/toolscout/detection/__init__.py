"""Tool detection engine.

Discovers which developer tools are installed on the host, extracts their
versions, caches results, and scans many tools concurrently with progress
reporting.

Public API::

    import asyncio
    from toolscout.detection import SystemDetector

    detector = SystemDetector()
    report = asyncio.run(detector.detect_tools())
    for category in report.categories:
        for tool in category.tools:
            print(tool.name, tool.found, tool.version)
"""

from __future__ import annotations

from toolscout.detection.detector import DetectionState, SystemDetector
from toolscout.detection.executor import AsyncCommandRunner, CommandOutput, CommandRunner
from toolscout.detection.models import (
    ApplicationFolderProbe,
    Architecture,
    CategoryReport,
    CategorySummary,
    CommandProbe,
    DetectionMethod,
    DetectionReport,
    DetectionRule,
    DetectionStrategy,
    DetectionSummary,
    EnvironmentVariableProbe,
    FilesystemProbe,
    Platform,
    Progress,
    SystemInfo,
    ToolDetectionResult,
)
from toolscout.detection.resolver import resolve_strategy
from toolscout.detection.rules import default_rules, load_rules
from toolscout.detection.system_info import SystemInfoProvider, detect_system_info
from toolscout.detection.version import extract_version

__all__ = [
    "ApplicationFolderProbe",
    "Architecture",
    "AsyncCommandRunner",
    "CategoryReport",
    "CategorySummary",
    "CommandOutput",
    "CommandProbe",
    "CommandRunner",
    "DetectionMethod",
    "DetectionReport",
    "DetectionRule",
    "DetectionState",
    "DetectionStrategy",
    "DetectionSummary",
    "EnvironmentVariableProbe",
    "FilesystemProbe",
    "Platform",
    "Progress",
    "SystemDetector",
    "SystemInfo",
    "SystemInfoProvider",
    "ToolDetectionResult",
    "default_rules",
    "detect_system_info",
    "extract_version",
    "load_rules",
    "resolve_strategy",
]
