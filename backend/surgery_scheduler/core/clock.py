"""
Clock sources.

Components never read the wall clock directly; a clock is injected so the
time-window rules can be driven with synthetic times.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now()


class ManualClock:
    """
    Settable clock for tests and scripted walkthroughs.

    Time never moves backwards: `set` and `advance` reject earlier values.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = _as_utc(start or datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._now

    def __call__(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> datetime:
        value = _as_utc(value)
        if value < self._now:
            raise ValueError("Clock cannot move backwards")
        self._now = value
        return self._now

    def advance(self, **delta) -> datetime:
        return self.set(self._now + timedelta(**delta))

    def set_hour(self, hour: int) -> datetime:
        """Move forward to the next instant whose UTC hour is `hour`."""
        candidate = self._now.replace(hour=hour, minute=0, second=0, microsecond=0)
        if candidate < self._now:
            candidate += timedelta(days=1)
        return self.set(candidate)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
