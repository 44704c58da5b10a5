"""
Clock port.

All timestamps are UTC. Engines read "now" through this port so date-range
resolution is deterministic under test.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """Clock interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time (timezone-aware)."""
        ...
