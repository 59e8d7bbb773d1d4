"""Best-effort version extraction from ``--version`` style output.

Patterns are tried in a fixed priority order:

1. Generic numeric patterns: ``v?X.Y.Z[.W]``, ``version X.Y.Z`` and a
   bare ``X.Y``.
2. Tool-specific overrides for outputs that carry only a major number
   (``v24``, ``Python 3``, ``git version 2``, ``Docker version 28``).
3. The first line of the trimmed output.

Step 3 is a known-lossy heuristic: a tool whose first output line has no
digits yields that line as its "version" (``"banana"`` -> ``"banana"``).
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

GENERIC_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"v?(\d+\.\d+\.\d+(?:\.\d+)?)"),
    re.compile(r"version\s+(\d+\.\d+\.\d+)", re.IGNORECASE),
    re.compile(r"v?(\d+\.\d+)"),
)

TOOL_OVERRIDES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^v(\d+)"),
    re.compile(r"Python\s+(\d+)"),
    re.compile(r"git version\s+(\d+)"),
    re.compile(r"Docker version\s+(\d+)"),
)


def _match_value(match: re.Match[str]) -> str:
    return match.group(1) if match.re.groups else match.group(0)


def extract_version(raw_output: str, pattern: str | None = None) -> str | None:
    """Turn raw command output into a version string.

    Args:
        raw_output: Combined command output (usually stdout).
        pattern: Optional rule-specific regex tried before the generic chain.
            An invalid pattern is logged and skipped.

    Returns:
        The extracted version, the first output line when nothing matched,
        or ``None`` for empty output. Never raises.
    """
    text = raw_output.strip()
    if not text:
        return None

    if pattern:
        try:
            match = re.search(pattern, text)
        except re.error:
            logger.warning("Invalid version pattern %r", pattern)
            match = None
        if match:
            return _match_value(match)

    for regex in GENERIC_PATTERNS + TOOL_OVERRIDES:
        match = regex.search(text)
        if match:
            return _match_value(match)

    return text.splitlines()[0].strip()
