"""Tests for the best-effort version extractor.

Covers the generic numeric patterns, the single-number overrides, the
rule-specific pattern hook, and the first-line fallback.
"""

from __future__ import annotations

import pytest

from toolscout.detection.version import extract_version


class TestVersionTable:
    """Reference outputs and their expected versions."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("v24.1.0", "24.1.0"),
            ("Python 3.13.4", "3.13.4"),
            ("git version 2.49.0", "2.49.0"),
            ("Docker version 28.2.2, build e6534b4", "28.2.2"),
            ("banana", "banana"),
        ],
    )
    def test_reference_outputs(self, raw: str, expected: str) -> None:
        assert extract_version(raw) == expected


class TestGenericPatterns:
    """Numeric patterns in priority order."""

    def test_four_component_version(self) -> None:
        assert extract_version("tool 1.2.3.4") == "1.2.3.4"

    def test_two_component_version(self) -> None:
        assert extract_version("VIM - Vi IMproved 9.1") == "9.1"

    def test_first_match_wins(self) -> None:
        """The earliest numeric triple in the output is returned."""
        assert extract_version("node v20.11.1 (npm 10.2.4)") == "20.11.1"

    def test_multiline_output(self) -> None:
        raw = "1.90.2\nabc123def\nx64\n"
        assert extract_version(raw) == "1.90.2"

    def test_version_on_later_line(self) -> None:
        raw = "Some Tool\nversion 4.5.6\n"
        assert extract_version(raw) == "4.5.6"


class TestOverrides:
    """Single-number versions caught by tool-specific overrides."""

    def test_bare_v_major(self) -> None:
        assert extract_version("v24") == "24"

    def test_python_major_only(self) -> None:
        assert extract_version("Python 3") == "3"

    def test_git_major_only(self) -> None:
        assert extract_version("git version 2") == "2"

    def test_docker_major_only(self) -> None:
        assert extract_version("Docker version 28, build abc") == "28"


class TestRulePattern:
    """A rule-specific pattern is tried before the generic chain."""

    def test_pattern_group_used(self) -> None:
        assert extract_version("go version go1.22.3 linux/amd64", r"go(\d+\.\d+\.\d+)") == "1.22.3"

    def test_pattern_without_group_uses_whole_match(self) -> None:
        assert extract_version("release 7.1", r"\d+\.\d+") == "7.1"

    def test_pattern_miss_falls_back_to_generic(self) -> None:
        assert extract_version("v18.0.0", r"nomatch (\d+)") == "18.0.0"

    def test_invalid_pattern_is_ignored(self) -> None:
        assert extract_version("v18.0.0", r"([unclosed") == "18.0.0"


class TestFallback:
    """Known-lossy first-line fallback and empty output."""

    def test_first_line_returned_when_no_digits(self) -> None:
        assert extract_version("  hello world\nsecond line\n") == "hello world"

    def test_empty_output_is_none(self) -> None:
        assert extract_version("") is None

    def test_whitespace_output_is_none(self) -> None:
        assert extract_version("   \n\t ") is None
