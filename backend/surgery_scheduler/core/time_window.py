"""
Time-window gating.

Pure predicates over an injected current time. Hour-of-day is derived
from epoch seconds, `(epoch // 3600 + offset) mod 24`, so the wrap from
hour 23 to hour 0 is exact for any offset.
"""

from datetime import datetime, timezone
from typing import Iterable, Tuple, Union

from .errors import ValidationError

TimeInput = Union[datetime, int, float]


def epoch_seconds(now: TimeInput) -> int:
    """Whole seconds since the epoch; naive datetimes are read as UTC."""
    if isinstance(now, datetime):
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return int(now.timestamp() // 1)
    return int(now // 1)


class TimeWindowPolicy:
    """Business-hour window and the discrete assignment hours."""

    def __init__(
        self,
        business_start: int = 8,
        business_end: int = 18,
        assignment_hours: Iterable[int] = (9, 13, 17),
        utc_offset_hours: int = 0,
    ):
        if not (0 <= business_start < business_end <= 24):
            raise ValidationError("Business hours must satisfy 0 <= start < end <= 24")
        hours: Tuple[int, ...] = tuple(sorted(set(assignment_hours)))
        if any(h < 0 or h > 23 for h in hours):
            raise ValidationError("Assignment hours must be within 0..23")

        self.business_start = business_start
        self.business_end = business_end
        self.assignment_hours = hours
        self.utc_offset_hours = utc_offset_hours

    @classmethod
    def from_config(cls, config) -> "TimeWindowPolicy":
        return cls(
            business_start=config.BUSINESS_HOURS_START,
            business_end=config.BUSINESS_HOURS_END,
            assignment_hours=config.ASSIGNMENT_HOURS,
            utc_offset_hours=config.UTC_OFFSET_HOURS,
        )

    def hour_of_day(self, now: TimeInput) -> int:
        return (epoch_seconds(now) // 3600 + self.utc_offset_hours) % 24

    def business_hour(self, now: TimeInput) -> bool:
        return self.business_start <= self.hour_of_day(now) < self.business_end

    def assignment_hour(self, now: TimeInput) -> bool:
        return self.hour_of_day(now) in self.assignment_hours

    def requests_open(self, slot, now: TimeInput) -> bool:
        return slot is not None and slot.is_open and self.business_hour(now)

    def assignment_open(self, slot, now: TimeInput) -> bool:
        return slot is not None and self.assignment_hour(now) and slot.is_open
