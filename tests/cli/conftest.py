"""Shared fixtures for CLI tests.

The rules file uses environment-variable probes on every platform, so
scans are deterministic and never spawn processes.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

ENV_RULES = """
rules:
  - name: Test SDK
    category: sdks
    essential: true
    strategies:
      - {platform: linux, method: environment-variable, env_var: TOOLSCOUT_TEST_SDK}
      - {platform: macos, method: environment-variable, env_var: TOOLSCOUT_TEST_SDK}
      - {platform: windows, method: environment-variable, env_var: TOOLSCOUT_TEST_SDK}
  - name: Other SDK
    category: sdks
    strategies:
      - {platform: linux, method: environment-variable, env_var: TOOLSCOUT_TEST_OTHER}
      - {platform: macos, method: environment-variable, env_var: TOOLSCOUT_TEST_OTHER}
      - {platform: windows, method: environment-variable, env_var: TOOLSCOUT_TEST_OTHER}
  - name: Build Home
    category: build
    strategies:
      - {platform: linux, method: environment-variable, env_var: TOOLSCOUT_TEST_BUILD}
      - {platform: macos, method: environment-variable, env_var: TOOLSCOUT_TEST_BUILD}
      - {platform: windows, method: environment-variable, env_var: TOOLSCOUT_TEST_BUILD}
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def env_rules(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Rules file with env-var probes; only the essential SDK is installed."""
    monkeypatch.setenv("TOOLSCOUT_TEST_SDK", "/opt/test-sdk")
    monkeypatch.delenv("TOOLSCOUT_TEST_OTHER", raising=False)
    monkeypatch.delenv("TOOLSCOUT_TEST_BUILD", raising=False)
    path = tmp_path / "rules.yaml"
    path.write_text(ENV_RULES, encoding="utf-8")
    return path
