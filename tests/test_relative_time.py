"""Tests for format_relative and the time helpers."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from aura.datamodel import TimeOfDay
from aura.utils import format_relative, from_utc_str, time_of_day, to_utc_str

from fakes import NOW


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=30), "right now"),
        (timedelta(minutes=-10), "right now"),
        (timedelta(seconds=60), "in 1 minute"),
        (timedelta(seconds=90), "in 2 minutes"),
        (timedelta(minutes=45), "in 45 minutes"),
        (timedelta(minutes=60), "in 1 hour"),
        (timedelta(minutes=90), "in 2 hours"),
        (timedelta(hours=23), "in 23 hours"),
    ],
)
def test_short_delays(delta, expected):
    assert format_relative(NOW, NOW + delta) == expected


def test_tomorrow_uses_calendar_day():
    target = datetime(2026, 10, 19, 20, 30, tzinfo=timezone.utc)

    assert format_relative(NOW, target) == "tomorrow at 20:30"


def test_later_dates_use_weekday_and_date():
    target = datetime(2026, 10, 21, 9, 5, tzinfo=timezone.utc)

    assert format_relative(NOW, target) == "on Wed, Oct 21 at 09:05"


def test_hour_rule_wins_over_tomorrow():
    late = datetime(2026, 10, 18, 23, 0, tzinfo=timezone.utc)
    after_midnight = datetime(2026, 10, 19, 1, 0, tzinfo=timezone.utc)

    assert format_relative(late, after_midnight) == "in 2 hours"


def test_calendar_and_clock_follow_the_given_timezone():
    now = datetime(2026, 10, 18, 20, 0, tzinfo=timezone.utc)
    target = now + timedelta(hours=30)

    assert format_relative(now, target) == "tomorrow at 02:00"
    assert format_relative(now, target, tz=ZoneInfo("Asia/Kolkata")) == "on Tue, Oct 20 at 07:30"


@pytest.mark.parametrize(
    "hour, bucket",
    [(0, TimeOfDay.MORNING), (11, TimeOfDay.MORNING), (12, TimeOfDay.AFTERNOON),
     (16, TimeOfDay.AFTERNOON), (17, TimeOfDay.EVENING), (20, TimeOfDay.EVENING), (21, TimeOfDay.NIGHT)],
)
def test_time_of_day_buckets(hour, bucket):
    assert time_of_day(hour) == bucket


def test_storage_time_format_is_utc_and_keeps_microseconds():
    local = datetime(2026, 10, 18, 19, 30, 15, 700000, tzinfo=ZoneInfo("Asia/Kolkata"))

    assert to_utc_str(local) == "2026-10-18 14:00:15.700000"
    assert from_utc_str("2026-10-18 14:00:15.700000") == datetime(2026, 10, 18, 14, 0, 15, 700000, tzinfo=timezone.utc)


def test_second_precision_timestamps_still_parse():
    assert from_utc_str("2026-10-18 14:00:15") == datetime(2026, 10, 18, 14, 0, 15, tzinfo=timezone.utc)
