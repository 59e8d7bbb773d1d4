"""Detection configuration and YAML config-file loading.

Recognized options (YAML keys match the dataclass fields)::

    parallel: true
    max_concurrency: 4
    bounded_concurrency: true
    default_timeout_ms: 10000
    cache_results: true
    cache_duration_seconds: 300
    include_categories: [programming-languages, version-control]
    exclude_categories: [containers]
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from toolscout.cache.result_cache import TOOL_RESULT_TTL_SECONDS
from toolscout.concurrency import default_concurrency
from toolscout.exceptions import ConfigError


@dataclass(frozen=True)
class DetectionConfig:
    """Static options for a ``SystemDetector``.

    Attributes:
        parallel: Scan categories through the batch processor (``True``)
            or one at a time (``False``).
        max_concurrency: Maximum categories scanned at once in parallel mode.
        bounded_concurrency: Enforce ``max_concurrency`` in parallel mode.
            ``False`` scans every selected category at once.
        default_timeout_ms: Probe timeout for strategies without their own.
        cache_results: Consult and update the result cache per tool.
        cache_duration_seconds: TTL of cached tool results.
        include_categories: If set, only these categories are scanned.
        exclude_categories: If set, these categories are skipped.
    """

    parallel: bool = True
    max_concurrency: int = field(default_factory=default_concurrency)
    bounded_concurrency: bool = True
    default_timeout_ms: int = 10_000
    cache_results: bool = True
    cache_duration_seconds: float = TOOL_RESULT_TTL_SECONDS
    include_categories: tuple[str, ...] | None = None
    exclude_categories: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.max_concurrency, int) or self.max_concurrency < 1:
            raise ConfigError(
                f"max_concurrency must be a positive integer, got {self.max_concurrency!r}"
            )
        if not isinstance(self.default_timeout_ms, int) or self.default_timeout_ms <= 0:
            raise ConfigError(
                f"default_timeout_ms must be a positive integer, got {self.default_timeout_ms!r}"
            )
        if self.cache_duration_seconds <= 0:
            raise ConfigError(
                f"cache_duration_seconds must be positive, got {self.cache_duration_seconds!r}"
            )

    def filter_categories(self, categories: list[str]) -> list[str]:
        """Apply the include list, then the exclude list, keeping order."""
        filtered = list(categories)
        if self.include_categories is not None:
            filtered = [c for c in filtered if c in self.include_categories]
        if self.exclude_categories is not None:
            filtered = [c for c in filtered if c not in self.exclude_categories]
        return filtered

    def with_overrides(self, **overrides: Any) -> DetectionConfig:
        """Return a copy with the non-``None`` overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


_FIELD_NAMES = {f.name for f in fields(DetectionConfig)}
_CATEGORY_FIELDS = ("include_categories", "exclude_categories")


def config_from_mapping(data: dict[str, Any]) -> DetectionConfig:
    """Build a config from a plain mapping, rejecting unknown keys."""
    unknown = sorted(set(data) - _FIELD_NAMES)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
    values = dict(data)
    for key in _CATEGORY_FIELDS:
        if values.get(key) is not None:
            if not isinstance(values[key], list):
                raise ConfigError(f"{key} must be a list of category names")
            values[key] = tuple(str(item) for item in values[key])
    try:
        return DetectionConfig(**values)
    except TypeError as exc:
        raise ConfigError(str(exc)) from exc


def load_config(path: Path) -> DetectionConfig:
    """Load a ``DetectionConfig`` from a YAML file.

    An empty file yields the default configuration.

    Raises:
        ConfigError: On unreadable files, malformed YAML, or invalid values.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc
    if raw is None:
        return DetectionConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping of options")
    return config_from_mapping(raw)
