"""
Clock adapters implementing TimePort.

Key behaviors:
- now_utc: current UTC time
- now_local: current time in the configured display timezone
- FrozenClock returns a fixed instant for deterministic tests and CLI runs
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, tzinfo

from marketing_console.domain.timeutil import get_timezone


class SystemClock:
    """System time with an explicit display timezone."""

    def __init__(self, tz_name: str = "UTC") -> None:
        """
        Initialize with specified timezone.

        Args:
            tz_name: IANA timezone name (default: UTC)
        """
        self._tz_name = tz_name
        self._tz = get_timezone(tz_name)

    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def now_local(self) -> datetime:
        return datetime.now(self._tz)

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    @property
    def timezone_name(self) -> str:
        return self._tz_name


class FrozenClock:
    """
    Clock that returns a fixed time.

    Useful for deterministic testing.
    """

    def __init__(self, frozen_utc: datetime, tz_name: str = "UTC") -> None:
        """
        Initialize with frozen time.

        Args:
            frozen_utc: The instant to return from now_utc() (naive is read as UTC)
            tz_name: IANA timezone name for local conversions
        """
        if frozen_utc.tzinfo is None:
            frozen_utc = frozen_utc.replace(tzinfo=UTC)
        self._frozen_utc = frozen_utc.astimezone(UTC)
        self._tz_name = tz_name
        self._tz = get_timezone(tz_name)

    def now_utc(self) -> datetime:
        return self._frozen_utc

    def now_local(self) -> datetime:
        return self._frozen_utc.astimezone(self._tz)

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    @property
    def timezone_name(self) -> str:
        return self._tz_name

    def advance(self, delta: timedelta) -> None:
        """Advance frozen time by delta (for testing)."""
        self._frozen_utc = self._frozen_utc + delta


def create_clock(tz_name: str = "UTC") -> SystemClock:
    """Factory function to create a system clock."""
    return SystemClock(tz_name)
