"""Shared fixtures for toolscout tests."""

from __future__ import annotations

import pytest

from toolscout.detection.models import Architecture, Platform, SystemInfo
from toolscout.detection.system_info import SystemInfoProvider

from tests.fakes import FakeClock, FakeRunner


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced time source starting at 1000.0 seconds."""
    return FakeClock()


@pytest.fixture
def runner() -> FakeRunner:
    """Fake command runner with no scripted commands."""
    return FakeRunner()


@pytest.fixture
def linux_info() -> SystemInfo:
    return SystemInfo(
        platform=Platform.LINUX,
        architecture=Architecture.X64,
        version="6.8.0",
        distribution="Ubuntu",
        distribution_version="24.04 LTS (Noble Numbat)",
    )


@pytest.fixture
def linux_provider(linux_info: SystemInfo) -> SystemInfoProvider:
    """System info provider pinned to a Linux host."""
    return SystemInfoProvider(detect=lambda: linux_info)
