"""Tests for the subprocess-backed command runner.

Uses the running interpreter as a portable, always-present executable.
"""

from __future__ import annotations

import asyncio
import sys

import pytest

from toolscout.detection.executor import AsyncCommandRunner
from toolscout.exceptions import (
    ProbeNonZeroExitError,
    ProbeSpawnError,
    ProbeTimeoutError,
)


def _run(args: list[str], timeout_ms: int = 10_000):
    return asyncio.run(AsyncCommandRunner().run(sys.executable, args, timeout_ms))


class TestAsyncCommandRunner:

    def test_captures_stdout(self) -> None:
        output = _run(["-c", "print('tool v1.2.3')"])
        assert output.stdout.strip() == "tool v1.2.3"
        assert output.exit_code == 0

    def test_captures_stderr(self) -> None:
        output = _run(["-c", "import sys; sys.stderr.write('banner 4.5.6')"])
        assert output.stderr == "banner 4.5.6"

    def test_non_zero_exit(self) -> None:
        with pytest.raises(ProbeNonZeroExitError) as excinfo:
            _run(["-c", "import sys; sys.stderr.write('bad flag\\n'); sys.exit(3)"])
        assert excinfo.value.exit_code == 3
        assert "bad flag" in str(excinfo.value)

    def test_timeout_kills_process(self) -> None:
        with pytest.raises(ProbeTimeoutError) as excinfo:
            _run(["-c", "import time; time.sleep(30)"], timeout_ms=300)
        assert excinfo.value.timeout_ms == 300
        assert "timed out after 300ms" in str(excinfo.value)

    def test_missing_executable(self) -> None:
        with pytest.raises(ProbeSpawnError, match="not found"):
            asyncio.run(
                AsyncCommandRunner().run("toolscout-no-such-binary", ["--version"], 1000)
            )

    def test_which(self) -> None:
        runner = AsyncCommandRunner()
        assert runner.which("toolscout-no-such-binary") is None
