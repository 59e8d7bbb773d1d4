"""Host platform detection.

``detect_system_info`` maps the interpreter's view of the host onto the
closed ``Platform`` / ``Architecture`` enums, reads the OS version, and on
Linux parses ``/etc/os-release`` for the distribution name and version.
``SystemInfoProvider`` caches the result with its own expiry because
strategy resolution for every tool depends on it.
"""

from __future__ import annotations

import logging
import platform as _platform
import time
from collections.abc import Callable
from pathlib import Path

from toolscout.cache.result_cache import SYSTEM_INFO_TTL_SECONDS, ResultCache
from toolscout.detection.models import Architecture, Platform, SystemInfo
from toolscout.exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")

_ARCH_MAP: dict[str, Architecture] = {
    "x86_64": Architecture.X64,
    "amd64": Architecture.X64,
    "x64": Architecture.X64,
    "i386": Architecture.X86,
    "i686": Architecture.X86,
    "x86": Architecture.X86,
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
    "arm": Architecture.ARM,
    "armv7l": Architecture.ARM,
    "armv6l": Architecture.ARM,
}


def detect_platform(system: str | None = None) -> Platform:
    """Map ``platform.system()`` output onto ``Platform``.

    Raises:
        UnsupportedPlatformError: For anything other than Windows, macOS
            or Linux.
    """
    name = (system if system is not None else _platform.system()).lower()
    if name == "darwin":
        return Platform.MACOS
    if name == "windows" or name.startswith(("cygwin", "msys")):
        return Platform.WINDOWS
    if name == "linux":
        return Platform.LINUX
    raise UnsupportedPlatformError(f"Unsupported platform: {name or 'unknown'}")


def detect_architecture(machine: str | None = None) -> Architecture:
    """Map ``platform.machine()`` output; unknown values fall back to x64."""
    value = (machine if machine is not None else _platform.machine()).strip().lower()
    return _ARCH_MAP.get(value, Architecture.X64)


def parse_os_release(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines of an os-release file, stripping quotes."""
    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        fields[key.strip()] = value.strip().strip('"').strip("'")
    return fields


def detect_linux_distribution(
    os_release: Path = OS_RELEASE_PATH,
) -> tuple[str | None, str | None]:
    """Return ``(name, version)`` from os-release, or ``(None, None)``."""
    try:
        fields = parse_os_release(os_release.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError):
        logger.debug("Cannot read %s", os_release)
        return None, None
    name = fields.get("NAME") or fields.get("ID")
    version = fields.get("VERSION") or fields.get("VERSION_ID")
    return name, version


def _os_version(host: Platform) -> str:
    if host is Platform.MACOS:
        release = _platform.mac_ver()[0]
        return f"macOS {release}" if release else f"macOS {_platform.release()}"
    if host is Platform.WINDOWS:
        return f"Windows {_platform.release()} ({_platform.version()})"
    return _platform.release()


def detect_system_info(os_release: Path = OS_RELEASE_PATH) -> SystemInfo:
    """Gather platform, architecture, OS version and Linux distribution."""
    host = detect_platform()
    distribution: str | None = None
    distribution_version: str | None = None
    if host is Platform.LINUX:
        distribution, distribution_version = detect_linux_distribution(os_release)

    info = SystemInfo(
        platform=host,
        architecture=detect_architecture(),
        version=_os_version(host),
        distribution=distribution,
        distribution_version=distribution_version,
    )
    logger.debug("Detected system info: %s", info)
    return info


class SystemInfoProvider:
    """Cached access to ``SystemInfo`` with expiry and manual invalidation.

    Args:
        ttl_seconds: How long a detected ``SystemInfo`` stays valid.
        detect: Detection function (injectable for tests).
        clock: Monotonic time source in seconds.
    """

    _KEY = "system-info"

    def __init__(
        self,
        ttl_seconds: float = SYSTEM_INFO_TTL_SECONDS,
        detect: Callable[[], SystemInfo] = detect_system_info,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._detect = detect
        self._cache: ResultCache[SystemInfo] = ResultCache(ttl_seconds, clock=clock)

    def get(self) -> SystemInfo:
        info = self._cache.get(self._KEY)
        if info is None:
            info = self._detect()
            self._cache.set(self._KEY, info)
        return info

    def invalidate(self) -> None:
        self._cache.clear()
