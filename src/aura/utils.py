import math
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from aura.datamodel import TimeOfDay

__all__ = ["now_utc", "to_utc_str", "from_utc_str", "to_user_local", "time_of_day",
           "format_relative", "DB_TIME_FORMAT"]

# fixed-width microseconds keep text order equal to time order
DB_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def now_utc() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)

def to_utc_str(dt: datetime) -> str:
    """Aware datetime -> 'YYYY-MM-DD HH:MM:SS.ffffff' in UTC (the storage format)"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(DB_TIME_FORMAT)

def from_utc_str(utc_str: str) -> datetime:
    """Also reads the second-precision strings written by CURRENT_TIMESTAMP"""
    return datetime.fromisoformat(utc_str).replace(tzinfo=timezone.utc)

def to_user_local(dt: datetime, user_tz: str) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(ZoneInfo(user_tz))

def time_of_day(hour: int) -> TimeOfDay:
    if hour < 12:
        return TimeOfDay.MORNING
    if hour < 17:
        return TimeOfDay.AFTERNOON
    if hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)

def _clock(dt: datetime) -> str:
    return dt.strftime("%H:%M")

def format_relative(now: datetime, target: datetime, tz: tzinfo | None = None) -> str:
    """Describe `target` relative to `now` for a chat message.

    The rules are a priority cascade, the first match wins:
    under sixty seconds -> "right now", minutes, hours (both rounded half-up),
    tomorrow's calendar day, then an absolute weekday/date. Calendar days and
    clock times are read in `tz`, defaulting to the timezone of `now`.
    """
    diff_seconds = (target - now).total_seconds()
    if diff_seconds < 60:
        return "right now"

    diff_mins = _round_half_up(diff_seconds / 60)
    diff_hours = _round_half_up(diff_seconds / 3600)
    if diff_mins == 1:
        return "in 1 minute"
    if diff_mins < 60:
        return f"in {diff_mins} minutes"
    if diff_hours == 1:
        return "in 1 hour"
    if diff_hours < 24:
        return f"in {diff_hours} hours"

    zone = tz or now.tzinfo
    local_now = now.astimezone(zone) if zone is not None else now
    local_target = target.astimezone(zone) if zone is not None else target

    tomorrow = local_now + timedelta(days=1)
    if local_target.date() == tomorrow.date():
        return f"tomorrow at {_clock(local_target)}"

    return f"on {local_target:%a}, {local_target:%b} {local_target.day} at {_clock(local_target)}"
