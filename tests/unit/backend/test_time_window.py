"""
Unit tests for TimeWindowPolicy.

Tests:
- Hour-of-day derivation and midnight wrap
- Business-hour window edges
- Assignment hours
- requests_open / assignment_open composition
"""

import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from surgery_scheduler.core import TimeWindowPolicy, ValidationError


def at(hour, minute=0, second=0, day=6):
    return datetime(2025, 1, day, hour, minute, second, tzinfo=timezone.utc)


@pytest.fixture
def policy():
    return TimeWindowPolicy()


# =============================================================================
# Test hour_of_day
# =============================================================================

class TestHourOfDay:
    """Tests for hour derivation from epoch seconds."""

    def test_reads_utc_hour(self, policy):
        assert policy.hour_of_day(at(10, 30)) == 10

    def test_wraps_exactly_at_midnight(self, policy):
        last_second = at(23, 59, 59)
        assert policy.hour_of_day(last_second) == 23
        assert policy.hour_of_day(last_second + timedelta(seconds=1)) == 0

    def test_accepts_epoch_seconds(self, policy):
        assert policy.hour_of_day(9 * 3600) == 9
        assert policy.hour_of_day(24 * 3600 + 5) == 0

    def test_naive_datetime_is_utc(self, policy):
        assert policy.hour_of_day(datetime(2025, 1, 6, 14, 0)) == 14

    def test_aware_datetime_in_other_zone(self, policy):
        plus_two = timezone(timedelta(hours=2))
        assert policy.hour_of_day(datetime(2025, 1, 6, 12, 0, tzinfo=plus_two)) == 10

    def test_fixed_offset_wraps(self):
        policy = TimeWindowPolicy(utc_offset_hours=-5)
        assert policy.hour_of_day(at(13)) == 8
        assert policy.hour_of_day(at(2)) == 21


# =============================================================================
# Test business and assignment hours
# =============================================================================

class TestWindows:
    """Tests for the business window and assignment instants."""

    def test_business_window_is_half_open(self, policy):
        assert policy.business_hour(at(8)) is True
        assert policy.business_hour(at(17, 59, 59)) is True
        assert policy.business_hour(at(18)) is False
        assert policy.business_hour(at(7, 59, 59)) is False

    def test_evening_is_closed(self, policy):
        assert policy.business_hour(at(19)) is False

    def test_assignment_hours(self, policy):
        assert [h for h in range(24) if policy.assignment_hour(at(h))] == [9, 13, 17]

    def test_assignment_hour_covers_whole_hour(self, policy):
        assert policy.assignment_hour(at(13, 59, 59)) is True
        assert policy.assignment_hour(at(14)) is False

    def test_custom_policy(self):
        policy = TimeWindowPolicy(business_start=6, business_end=22, assignment_hours=(12,))
        assert policy.business_hour(at(21)) is True
        assert policy.assignment_hour(at(12)) is True
        assert policy.assignment_hour(at(13)) is False

    def test_rejects_inverted_business_hours(self):
        with pytest.raises(ValidationError):
            TimeWindowPolicy(business_start=18, business_end=8)

    def test_rejects_out_of_range_assignment_hour(self):
        with pytest.raises(ValidationError):
            TimeWindowPolicy(assignment_hours=(24,))

    def test_from_config(self):
        config = SimpleNamespace(
            BUSINESS_HOURS_START=7,
            BUSINESS_HOURS_END=19,
            ASSIGNMENT_HOURS=(10, 15),
            UTC_OFFSET_HOURS=1,
        )
        policy = TimeWindowPolicy.from_config(config)
        assert policy.business_start == 7
        assert policy.assignment_hours == (10, 15)
        assert policy.hour_of_day(at(9)) == 10


# =============================================================================
# Test slot-dependent predicates
# =============================================================================

class TestSlotPredicates:
    """requests_open / assignment_open combine slot state with time."""

    def test_no_slot_is_never_open(self, policy):
        assert policy.requests_open(None, at(10)) is False
        assert policy.assignment_open(None, at(13)) is False

    def test_open_slot(self, policy):
        slot = SimpleNamespace(is_open=True)
        assert policy.requests_open(slot, at(10)) is True
        assert policy.requests_open(slot, at(19)) is False
        assert policy.assignment_open(slot, at(13)) is True
        assert policy.assignment_open(slot, at(14)) is False

    def test_closed_slot(self, policy):
        slot = SimpleNamespace(is_open=False)
        assert policy.requests_open(slot, at(10)) is False
        assert policy.assignment_open(slot, at(13)) is False
