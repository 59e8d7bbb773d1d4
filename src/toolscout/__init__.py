"""toolscout: Detect installed developer tools, their versions, and cache the results."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
