"""toolscout exception hierarchy.

All public exceptions inherit from ToolScoutError, giving callers a single
base class to catch when they want to handle any toolscout-specific failure
without swallowing unrelated errors.

Probe-level errors (``ProbeError`` and its subclasses) are raised by the
command execution adapter and converted into "not found" detection results
by the probe layer. Only orchestration-level errors escape a scan.
"""

from __future__ import annotations


class ToolScoutError(Exception):
    """Base exception for all toolscout errors."""


class ProbeError(ToolScoutError):
    """Raised when a single tool probe cannot complete.

    Attributes:
        command: The command line (or path) being probed, if any.
    """

    def __init__(self, message: str, command: str = "") -> None:
        super().__init__(message)
        self.command = command


class ProbeTimeoutError(ProbeError):
    """Raised when a probe exceeds its timeout and the process is killed."""

    def __init__(self, command: str, timeout_ms: int) -> None:
        super().__init__(
            f"Command timed out after {timeout_ms}ms: {command}", command
        )
        self.timeout_ms = timeout_ms


class ProbeSpawnError(ProbeError):
    """Raised when the probe process cannot be started at all.

    Covers missing executables, permission errors, and OS-level spawn
    failures.
    """


class ProbeNonZeroExitError(ProbeError):
    """Raised when the probe process exits with a non-zero status."""

    def __init__(
        self, command: str, exit_code: int, stdout: str = "", stderr: str = ""
    ) -> None:
        detail = stderr.strip().splitlines()[0] if stderr.strip() else ""
        message = f"Command exited with code {exit_code}: {command}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, command)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class NoStrategyForPlatformError(ToolScoutError):
    """Raised when a rule has no detection strategy for the host platform."""

    def __init__(self, tool: str, platform: str) -> None:
        super().__init__(f"No detection strategy for platform: {platform}")
        self.tool = tool
        self.platform = platform


class UnsupportedPlatformError(ToolScoutError):
    """Raised when the host operating system is not windows, macos or linux."""


class RuleLoadError(ToolScoutError):
    """Raised when detection rules cannot be loaded.

    Covers unreadable rule files, malformed YAML, unknown detection
    methods, and rules without any strategy.
    """


class ConfigError(ToolScoutError):
    """Raised for invalid detection configuration values or files."""


class DetectionInProgressError(ToolScoutError):
    """Raised when a detector is asked to start a second concurrent scan."""
