"""Execute one resolved detection strategy and build its result.

Every probe returns a ``ToolDetectionResult``; probe-level failures
(timeouts, missing executables, non-zero exits, unreadable paths) are
recovered here into ``found=False`` results that keep the error message
for diagnostics. Dispatch over the strategy variants is exhaustive; an
unknown variant is a programming error and raises ``TypeError``.
"""

from __future__ import annotations

import json
import logging
import os
import plistlib
import re
from pathlib import Path

from toolscout.detection.executor import CommandRunner
from toolscout.detection.models import (
    ApplicationFolderProbe,
    CommandProbe,
    DetectionRule,
    DetectionStrategy,
    EnvironmentVariableProbe,
    FilesystemProbe,
    ToolDetectionResult,
)
from toolscout.detection.version import extract_version
from toolscout.exceptions import ProbeError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10_000

VERSION_FILES: tuple[str, ...] = ("VERSION", "version.txt", "RELEASE", "package.json")
_VERSION_IN_FILE = re.compile(r"(\d+\.\d+(?:\.\d+)?)")


async def run_probe(
    rule: DetectionRule,
    strategy: DetectionStrategy,
    runner: CommandRunner,
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> ToolDetectionResult:
    """Probe one tool with one strategy.

    Args:
        rule: The rule being evaluated (supplies the tool name).
        strategy: The platform strategy chosen by the resolver.
        runner: Command execution adapter for command probes.
        default_timeout_ms: Used when the strategy has no timeout.

    Returns:
        A fresh ``ToolDetectionResult``.
    """
    if isinstance(strategy, CommandProbe):
        timeout_ms = strategy.timeout_ms or default_timeout_ms
        return await _probe_command(rule.name, strategy, runner, timeout_ms)
    if isinstance(strategy, ApplicationFolderProbe):
        return _probe_paths(rule.name, strategy, strategy.paths, None)
    if isinstance(strategy, FilesystemProbe):
        return _probe_paths(rule.name, strategy, strategy.paths, strategy.version_regex)
    if isinstance(strategy, EnvironmentVariableProbe):
        return _probe_env(rule.name, strategy)
    raise TypeError(f"Unsupported detection strategy: {type(strategy).__name__}")


async def _probe_command(
    name: str, strategy: CommandProbe, runner: CommandRunner, timeout_ms: int
) -> ToolDetectionResult:
    try:
        output = await runner.run(strategy.command, list(strategy.args), timeout_ms)
    except ProbeError as exc:
        logger.debug("Probe for %s failed: %s", name, exc)
        return ToolDetectionResult.not_found(name, strategy.method, error=str(exc))

    # Some tools (java, older pythons) print their banner on stderr.
    text = output.stdout if output.stdout.strip() else output.stderr
    version = extract_version(text, strategy.version_regex)
    return ToolDetectionResult(
        name=name,
        found=True,
        detection_method=strategy.method,
        version=version,
        path=runner.which(strategy.command),
    )


def expand_path(raw: str) -> Path:
    """Expand ``~`` and ``$VAR`` / ``%VAR%`` references in a candidate path."""
    return Path(os.path.expandvars(os.path.expanduser(raw)))


def _probe_paths(
    name: str,
    strategy: ApplicationFolderProbe | FilesystemProbe,
    candidates: tuple[str, ...],
    version_regex: str | None,
) -> ToolDetectionResult:
    found: list[Path] = []
    for raw in candidates:
        path = expand_path(raw)
        try:
            if path.exists():
                found.append(path)
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", path, exc)

    if not found:
        return ToolDetectionResult.not_found(
            name, strategy.method, error="Not found in standard installation paths"
        )

    return ToolDetectionResult(
        name=name,
        found=True,
        detection_method=strategy.method,
        version=read_installed_version(found[0], version_regex),
        path=str(found[0]),
        metadata={"found_paths": [str(p) for p in found]},
    )


def read_installed_version(path: Path, pattern: str | None = None) -> str | None:
    """Read a version from files inside an installation path.

    Checks macOS bundle metadata (``Contents/Info.plist``) first, then
    ``VERSION``, ``version.txt``, ``RELEASE`` and ``package.json``. A plain
    file is read directly. Unreadable or unparsable files are skipped.
    """
    if path.is_file():
        return _version_from_text(path, pattern)

    plist = path / "Contents" / "Info.plist"
    if plist.is_file():
        try:
            with plist.open("rb") as handle:
                data = plistlib.load(handle)
            version = data.get("CFBundleShortVersionString")
            if isinstance(version, str) and version:
                return version
        except (OSError, plistlib.InvalidFileException, ValueError):
            logger.warning("Unreadable bundle metadata: %s", plist)

    for filename in VERSION_FILES:
        candidate = path / filename
        if not candidate.is_file():
            continue
        if filename == "package.json":
            try:
                data = json.loads(candidate.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError):
                logger.warning("Unreadable package.json: %s", candidate)
                continue
            version = data.get("version") if isinstance(data, dict) else None
            if isinstance(version, str) and version:
                return version
            continue
        version = _version_from_text(candidate, pattern)
        if version:
            return version
    return None


def _version_from_text(path: Path, pattern: str | None) -> str | None:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        logger.warning("Unreadable version file: %s", path)
        return None
    if pattern:
        try:
            match = re.search(pattern, text)
        except re.error:
            logger.warning("Invalid version pattern %r", pattern)
            match = None
        if match:
            return match.group(1) if match.re.groups else match.group(0)
    match = _VERSION_IN_FILE.search(text)
    return match.group(1) if match else None


def _probe_env(name: str, strategy: EnvironmentVariableProbe) -> ToolDetectionResult:
    value = os.environ.get(strategy.env_var, "")
    if not value:
        return ToolDetectionResult.not_found(
            name, strategy.method, error=f"Environment variable {strategy.env_var} is not set"
        )
    return ToolDetectionResult(
        name=name, found=True, detection_method=strategy.method, path=value,
    )
