"""Tests for platform strategy resolution."""

from __future__ import annotations

from toolscout.detection.models import (
    ApplicationFolderProbe,
    CommandProbe,
    DetectionRule,
    Platform,
)
from toolscout.detection.resolver import resolve_strategy


def _vscode_rule() -> DetectionRule:
    return DetectionRule(
        name="Visual Studio Code",
        category="ides-editors",
        strategies=(
            CommandProbe(Platform.WINDOWS, "code"),
            ApplicationFolderProbe(Platform.MACOS, ("/Applications/Visual Studio Code.app",)),
        ),
    )


class TestResolveStrategy:

    def test_matches_platform(self) -> None:
        strategy = resolve_strategy(_vscode_rule(), Platform.MACOS)
        assert isinstance(strategy, ApplicationFolderProbe)

    def test_no_match_returns_none(self) -> None:
        assert resolve_strategy(_vscode_rule(), Platform.LINUX) is None

    def test_first_match_wins(self) -> None:
        rule = DetectionRule(
            name="Python",
            category="programming-languages",
            strategies=(
                CommandProbe(Platform.LINUX, "python3"),
                CommandProbe(Platform.LINUX, "python"),
            ),
        )
        strategy = resolve_strategy(rule, Platform.LINUX)
        assert isinstance(strategy, CommandProbe)
        assert strategy.command == "python3"
