"""Tests for DetectionConfig validation and YAML loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from toolscout.config import DetectionConfig, config_from_mapping, load_config
from toolscout.exceptions import ConfigError


class TestDetectionConfig:

    def test_defaults(self) -> None:
        config = DetectionConfig()
        assert config.parallel is True
        assert config.bounded_concurrency is True
        assert 2 <= config.max_concurrency <= 8
        assert config.default_timeout_ms == 10_000
        assert config.cache_results is True
        assert config.cache_duration_seconds == 300

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_concurrency": 0},
            {"default_timeout_ms": 0},
            {"default_timeout_ms": 1.5},
            {"cache_duration_seconds": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ConfigError):
            DetectionConfig(**kwargs)

    def test_filter_include_then_exclude(self) -> None:
        config = DetectionConfig(
            include_categories=("a", "b", "c"), exclude_categories=("b",),
        )
        assert config.filter_categories(["c", "b", "a", "d"]) == ["c", "a"]

    def test_filter_no_lists(self) -> None:
        assert DetectionConfig().filter_categories(["x", "y"]) == ["x", "y"]

    def test_overrides_ignore_none(self) -> None:
        config = DetectionConfig(max_concurrency=3)
        updated = config.with_overrides(max_concurrency=None, parallel=False)
        assert updated.max_concurrency == 3
        assert updated.parallel is False

    def test_overrides_all_none_returns_same(self) -> None:
        config = DetectionConfig()
        assert config.with_overrides(parallel=None) is config


class TestConfigFromMapping:

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="Unknown configuration keys: colour"):
            config_from_mapping({"colour": "blue"})

    def test_category_lists_become_tuples(self) -> None:
        config = config_from_mapping({"include_categories": ["containers"]})
        assert config.include_categories == ("containers",)

    def test_category_must_be_list(self) -> None:
        with pytest.raises(ConfigError, match="list of category names"):
            config_from_mapping({"exclude_categories": "containers"})


class TestLoadConfig:

    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "toolscout.yaml"
        path.write_text(
            "parallel: false\n"
            "max_concurrency: 3\n"
            "bounded_concurrency: false\n"
            "default_timeout_ms: 2500\n"
            "cache_results: false\n"
            "cache_duration_seconds: 60\n"
            "exclude_categories: [containers]\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.parallel is False
        assert config.max_concurrency == 3
        assert config.bounded_concurrency is False
        assert config.default_timeout_ms == 2500
        assert config.cache_results is False
        assert config.cache_duration_seconds == 60
        assert config.exclude_categories == ("containers",)

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DetectionConfig()

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("parallel: [", encoding="utf-8")
        with pytest.raises(ConfigError, match="Malformed YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- parallel\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="expected a mapping"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "neg.yaml"
        path.write_text("max_concurrency: -2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="max_concurrency"):
            load_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path / "absent.yaml")
