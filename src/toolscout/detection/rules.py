"""Detection rule registry: built-in rules and YAML rule files.

``default_rules()`` returns the built-in rules grouped by category, in
declaration order. ``load_rules(path)`` reads the same structure from a
YAML file, e.g.::

    rules:
      - name: Node.js
        category: programming-languages
        essential: true
        strategies:
          - platform: linux
            method: command
            command: node
            args: ["--version"]
            version_regex: 'v(\\d+\\.\\d+\\.\\d+)'
            timeout_ms: 5000
          - platform: macos
            method: application-folder
            paths: ["/Applications/Node.app"]

Rules are immutable once built; the registry is a plain ordered mapping
``category -> tuple[DetectionRule, ...]``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from toolscout.detection.models import (
    ApplicationFolderProbe,
    CommandProbe,
    DetectionMethod,
    DetectionRule,
    DetectionStrategy,
    EnvironmentVariableProbe,
    FilesystemProbe,
    Platform,
)
from toolscout.exceptions import RuleLoadError

RuleRegistry = dict[str, tuple[DetectionRule, ...]]

_ALL_PLATFORMS: tuple[Platform, ...] = (Platform.WINDOWS, Platform.MACOS, Platform.LINUX)


def _command_everywhere(
    command: str,
    version_regex: str | None = None,
    args: tuple[str, ...] = ("--version",),
    timeout_ms: int = 5000,
    overrides: Mapping[Platform, str] | None = None,
) -> tuple[DetectionStrategy, ...]:
    """Same command probe on every platform, with per-platform command names."""
    overrides = overrides or {}
    return tuple(
        CommandProbe(
            platform=host,
            command=overrides.get(host, command),
            args=args,
            version_regex=version_regex,
            timeout_ms=timeout_ms,
        )
        for host in _ALL_PLATFORMS
    )


def _build_default_rules() -> list[DetectionRule]:
    return [
        # -- Programming languages --
        DetectionRule(
            name="Node.js",
            category="programming-languages",
            essential=True,
            strategies=_command_everywhere("node", r"v(\d+\.\d+\.\d+)"),
        ),
        DetectionRule(
            name="Python",
            category="programming-languages",
            essential=True,
            strategies=_command_everywhere(
                "python3",
                r"Python (\d+\.\d+\.\d+)",
                overrides={Platform.WINDOWS: "python"},
            ),
        ),
        DetectionRule(
            name="Go",
            category="programming-languages",
            strategies=_command_everywhere("go", r"go(\d+\.\d+(?:\.\d+)?)", args=("version",)),
        ),
        DetectionRule(
            name="Rust",
            category="programming-languages",
            strategies=_command_everywhere("rustc", r"rustc (\d+\.\d+\.\d+)"),
        ),
        DetectionRule(
            name="Java",
            category="programming-languages",
            strategies=_command_everywhere("java", r'version "?(\d+(?:\.\d+)*)', args=("-version",)),
        ),
        # -- IDEs and editors --
        DetectionRule(
            name="Visual Studio Code",
            category="ides-editors",
            essential=True,
            strategies=(
                CommandProbe(Platform.WINDOWS, "code", ("--version",), r"(\d+\.\d+\.\d+)", 5000),
                ApplicationFolderProbe(
                    Platform.MACOS, ("/Applications/Visual Studio Code.app",), 1000,
                ),
                CommandProbe(Platform.LINUX, "code", ("--version",), r"(\d+\.\d+\.\d+)", 5000),
            ),
        ),
        DetectionRule(
            name="Vim",
            category="ides-editors",
            strategies=_command_everywhere("vim", r"VIM - Vi IMproved (\d+\.\d+)"),
        ),
        # -- Version control --
        DetectionRule(
            name="Git",
            category="version-control",
            essential=True,
            strategies=_command_everywhere("git", r"git version (\d+\.\d+\.\d+)"),
        ),
        # -- Containers --
        DetectionRule(
            name="Docker",
            category="containers",
            strategies=_command_everywhere("docker", r"Docker version (\d+\.\d+\.\d+)"),
        ),
        DetectionRule(
            name="kubectl",
            category="containers",
            strategies=_command_everywhere(
                "kubectl", r"v(\d+\.\d+\.\d+)", args=("version", "--client"),
            ),
        ),
        # -- Package managers --
        DetectionRule(
            name="npm",
            category="package-managers",
            essential=True,
            strategies=_command_everywhere("npm", overrides={Platform.WINDOWS: "npm.cmd"}),
        ),
        DetectionRule(
            name="pip",
            category="package-managers",
            strategies=_command_everywhere("pip3", r"pip (\d+\.\d+(?:\.\d+)?)",
                                           overrides={Platform.WINDOWS: "pip"}),
        ),
        DetectionRule(
            name="Homebrew",
            category="package-managers",
            strategies=(
                CommandProbe(Platform.MACOS, "brew", ("--version",), r"Homebrew (\d+\.\d+\.\d+)", 5000),
                CommandProbe(Platform.LINUX, "brew", ("--version",), r"Homebrew (\d+\.\d+\.\d+)", 5000),
            ),
        ),
        DetectionRule(
            name="Chocolatey",
            category="package-managers",
            strategies=(
                EnvironmentVariableProbe(Platform.WINDOWS, "ChocolateyInstall"),
            ),
        ),
    ]


def group_by_category(rules: Iterable[DetectionRule]) -> RuleRegistry:
    """Group rules by category, keeping first-seen category order.

    Raises:
        RuleLoadError: If two rules share a name.
    """
    grouped: dict[str, list[DetectionRule]] = {}
    seen: set[str] = set()
    for rule in rules:
        if rule.name in seen:
            raise RuleLoadError(f"Duplicate detection rule: {rule.name}")
        seen.add(rule.name)
        grouped.setdefault(rule.category, []).append(rule)
    return {category: tuple(items) for category, items in grouped.items()}


def default_rules() -> RuleRegistry:
    """Return the built-in rule registry."""
    return group_by_category(_build_default_rules())


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data or data[key] in (None, ""):
        raise RuleLoadError(f"{where}: missing required field '{key}'")
    return data[key]


def _str_tuple(value: Any, where: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise RuleLoadError(f"{where}: expected a string or list of strings")


def parse_strategy(data: Mapping[str, Any], where: str) -> DetectionStrategy:
    """Build one strategy from its mapping form."""
    if not isinstance(data, Mapping):
        raise RuleLoadError(f"{where}: strategy must be a mapping")
    try:
        host = Platform(_require(data, "platform", where))
    except ValueError as exc:
        raise RuleLoadError(f"{where}: unknown platform {data.get('platform')!r}") from exc
    try:
        method = DetectionMethod(data.get("method", DetectionMethod.COMMAND.value))
    except ValueError as exc:
        raise RuleLoadError(f"{where}: unknown method {data.get('method')!r}") from exc

    timeout_ms = data.get("timeout_ms")
    if timeout_ms is not None and (not isinstance(timeout_ms, int) or timeout_ms <= 0):
        raise RuleLoadError(f"{where}: timeout_ms must be a positive integer")

    if method is DetectionMethod.COMMAND:
        return CommandProbe(
            platform=host,
            command=str(_require(data, "command", where)),
            args=_str_tuple(data.get("args", ["--version"]), where),
            version_regex=data.get("version_regex"),
            timeout_ms=timeout_ms,
        )
    if method is DetectionMethod.APPLICATION_FOLDER:
        return ApplicationFolderProbe(
            platform=host,
            paths=_str_tuple(_require(data, "paths", where), where),
            timeout_ms=timeout_ms,
        )
    if method is DetectionMethod.FILESYSTEM:
        return FilesystemProbe(
            platform=host,
            paths=_str_tuple(_require(data, "paths", where), where),
            version_regex=data.get("version_regex"),
            timeout_ms=timeout_ms,
        )
    if method is DetectionMethod.ENVIRONMENT_VARIABLE:
        return EnvironmentVariableProbe(
            platform=host,
            env_var=str(_require(data, "env_var", where)),
            timeout_ms=timeout_ms,
        )
    raise RuleLoadError(f"{where}: unsupported method {method.value}")


def parse_rule(data: Mapping[str, Any], index: int) -> DetectionRule:
    """Build one rule from its mapping form."""
    if not isinstance(data, Mapping):
        raise RuleLoadError(f"rule #{index}: must be a mapping")
    name = str(_require(data, "name", f"rule #{index}"))
    where = f"rule {name!r}"
    strategies_raw = data.get("strategies") or []
    if not isinstance(strategies_raw, list) or not strategies_raw:
        raise RuleLoadError(f"{where}: at least one strategy is required")
    strategies = tuple(
        parse_strategy(item, f"{where} strategy #{i}")
        for i, item in enumerate(strategies_raw)
    )
    return DetectionRule(
        name=name,
        category=str(_require(data, "category", where)),
        strategies=strategies,
        essential=bool(data.get("essential", False)),
    )


def load_rules(path: Path) -> RuleRegistry:
    """Load a rule registry from a YAML file.

    Raises:
        RuleLoadError: On unreadable files, malformed YAML, or invalid rules.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise RuleLoadError(f"Cannot read rules file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise RuleLoadError(f"Malformed YAML in {path}: {exc}") from exc

    if isinstance(raw, Mapping):
        raw = raw.get("rules")
    if not isinstance(raw, list):
        raise RuleLoadError(f"{path}: expected a list of rules")
    return group_by_category(parse_rule(item, i) for i, item in enumerate(raw))
