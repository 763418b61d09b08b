"""
Time interface.

Date presets ("last 7 days", "last 24h") are relative to "now", so the
current time is injected instead of read from the system inside the core.
The display timezone travels with the time port so that calendar-period
bucketing never depends on the host's timezone.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Protocol


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

    def now_local(self) -> datetime:
        """Get current time in the display timezone."""
        ...

    @property
    def timezone(self) -> tzinfo:
        """Display timezone used for calendar periods."""
        ...
