"""Command execution adapter used by command probes.

The detector depends only on the ``CommandRunner`` protocol so tests can
inject a fake. ``AsyncCommandRunner`` is the production implementation:
it spawns the executable directly (no shell), captures stdout/stderr, and
enforces the timeout by killing the child process rather than merely
abandoning it, so repeated scans never leak processes.

Failures are raised as ``ProbeError`` subclasses:

- ``ProbeSpawnError``: executable missing or not runnable.
- ``ProbeTimeoutError``: timeout reached; process killed and reaped.
- ``ProbeNonZeroExitError``: process exited with a non-zero status.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass
from typing import Protocol

from toolscout.exceptions import (
    ProbeNonZeroExitError,
    ProbeSpawnError,
    ProbeTimeoutError,
)

logger = logging.getLogger(__name__)

# Output is truncated to this many characters, enough for any version banner.
MAX_OUTPUT_CHARS = 8000


@dataclass(frozen=True)
class CommandOutput:
    """Captured output of a successful command run."""

    stdout: str
    stderr: str
    exit_code: int = 0


class CommandRunner(Protocol):
    """Abstract process runner for command probes."""

    async def run(
        self, command: str, args: list[str] | tuple[str, ...], timeout_ms: int
    ) -> CommandOutput:
        """Run a command and return its captured output.

        Raises:
            ProbeTimeoutError: The timeout elapsed; the process was killed.
            ProbeNonZeroExitError: The process exited with a non-zero code.
            ProbeSpawnError: The process could not be started.
        """
        ...

    def which(self, command: str) -> str | None:
        """Return the resolved executable path, or ``None`` if not on PATH."""
        ...


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")[:MAX_OUTPUT_CHARS]


class AsyncCommandRunner:
    """Run executables with ``asyncio.create_subprocess_exec``."""

    async def run(
        self, command: str, args: list[str] | tuple[str, ...], timeout_ms: int
    ) -> CommandOutput:
        command_line = " ".join([command, *args])
        logger.debug("Running %s (timeout %dms)", command_line, timeout_ms)
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise ProbeSpawnError(
                f"Command not found or not executable: {command}", command_line
            ) from exc
        except OSError as exc:
            raise ProbeSpawnError(
                f"Failed to start {command}: {exc}", command_line
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            await self._kill(proc)
            raise ProbeTimeoutError(command_line, timeout_ms) from None
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        out, err = _decode(stdout), _decode(stderr)
        if proc.returncode != 0:
            raise ProbeNonZeroExitError(
                command_line, proc.returncode or -1, stdout=out, stderr=err
            )
        return CommandOutput(stdout=out, stderr=err, exit_code=0)

    def which(self, command: str) -> str | None:
        return shutil.which(command)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        """Kill a child process and wait for it so no zombie is left behind."""
        if proc.returncode is not None:
            return
        try:
            proc.kill()
        except ProcessLookupError:
            return
        await proc.wait()
