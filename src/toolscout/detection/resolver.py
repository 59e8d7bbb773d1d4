"""Select the detection strategy that applies to the host platform."""

from __future__ import annotations

from toolscout.detection.models import DetectionRule, DetectionStrategy, Platform


def resolve_strategy(
    rule: DetectionRule, platform: Platform
) -> DetectionStrategy | None:
    """Return the first strategy of ``rule`` targeting ``platform``.

    Rules are expected to declare at most one strategy per platform; this
    is not validated. ``None`` means the caller must report a
    "no strategy for platform" result.
    """
    for strategy in rule.strategies:
        if strategy.platform == platform:
            return strategy
    return None
