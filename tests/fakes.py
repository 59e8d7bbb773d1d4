"""Test doubles: a scriptable command runner and a manual clock.

``FakeRunner`` maps an executable name to either a ``CommandOutput`` or an
exception instance, records every call, and can delay responses to
simulate out-of-order completion. ``active`` and ``peak`` track how many
calls are in flight.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from toolscout.detection.executor import CommandOutput
from toolscout.exceptions import ProbeSpawnError


class FakeClock:
    """Monotonic clock advanced explicitly by tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeRunner:
    responses: dict[str, CommandOutput | BaseException] = field(default_factory=dict)
    delays: dict[str, float] = field(default_factory=dict)
    calls: list[tuple[str, tuple[str, ...], int]] = field(default_factory=list)
    paths: dict[str, str] = field(default_factory=dict)
    active: int = 0
    peak: int = 0

    def respond(self, command: str, stdout: str = "", stderr: str = "") -> None:
        self.responses[command] = CommandOutput(stdout=stdout, stderr=stderr)

    def fail(self, command: str, error: BaseException) -> None:
        self.responses[command] = error

    def calls_for(self, command: str) -> int:
        return sum(1 for call in self.calls if call[0] == command)

    async def run(self, command, args, timeout_ms):
        self.calls.append((command, tuple(args), timeout_ms))
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            delay = self.delays.get(command)
            if delay:
                await asyncio.sleep(delay)
        finally:
            self.active -= 1
        response = self.responses.get(command)
        if response is None:
            raise ProbeSpawnError(f"Command not found or not executable: {command}", command)
        if isinstance(response, BaseException):
            raise response
        return response

    def which(self, command: str) -> str | None:
        if command in self.paths:
            return self.paths[command]
        if isinstance(self.responses.get(command), CommandOutput):
            return f"/usr/bin/{command}"
        return None
