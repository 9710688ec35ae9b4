"""Reminder intent detection for free-form chat text.

Scoring: a reminder keyword is worth 40, a time expression 30, a matching
sentence pattern 20, and a health keyword together with a time 10. Text is a
reminder request at 50 points or when it has both a keyword and a time.
"""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from aura.datamodel import ReminderIntent

__all__ = ["detect_reminder_intent", "resolve_due_at"]

_REMINDER_PATTERNS = [
    re.compile(r"remind\s+me\s+(?:to\s+)?(.+?)(?:\s+(?:in|at|by|tomorrow|today|tonight))", re.I),
    re.compile(r"set\s+(?:a\s+)?reminder\s+(?:to\s+)?(.+?)(?:\s+(?:in|at|by|for))", re.I),
    re.compile(r"don'?t\s+let\s+me\s+forget\s+(?:to\s+)?(.+?)(?:\s+(?:in|at|by)|$)", re.I),
    re.compile(r"wake\s+me\s+up\s+(?:at\s+)?(.+)", re.I),
    re.compile(r"alarm\s+(?:for|at)\s+(.+)", re.I),
    re.compile(r"(.+?)\s+(?:yaad|remind)\s+(?:kar|karna|dena)", re.I),
    re.compile(r"(.+?)\s+(?:at|in)\s+(\d{1,2}(?::\d{2})?\s*(?:am|pm)?|\d+\s*(?:minute|hour|min|hr)s?)", re.I),
]

_IN_MINUTES = re.compile(r"in\s+(\d+)\s*(?:minutes?|mins?|m)\b", re.I)
_IN_HOURS = re.compile(r"in\s+(\d+)\s*(?:hours?|hrs?|h)\b", re.I)
_AT_TIME = re.compile(r"at\s+(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.I)
_TIME_PATTERNS = [
    _IN_MINUTES,
    _IN_HOURS,
    _AT_TIME,
    re.compile(r"tomorrow", re.I),
    re.compile(r"today", re.I),
    re.compile(r"tonight", re.I),
    re.compile(r"(?:in\s+the\s+)?morning", re.I),
    re.compile(r"(?:in\s+the\s+)?evening", re.I),
    re.compile(r"(?:at\s+)?night", re.I),
]

_REMINDER_KEYWORDS = (
    "remind", "reminder", "alarm", "wake up", "wake me",
    "don't forget", "dont forget", "remember to",
    "schedule", "set timer", "notify me",
    "yaad", "remind karo", "reminder set", "bata dena",
    "alert me", "ping me", "tell me to",
)

_HEALTH_KEYWORDS = (
    "water", "drink", "medicine", "pill", "tablet",
    "workout", "exercise", "gym", "walk", "run",
    "stretch", "meditation", "yoga", "sleep", "eat",
)

_TITLE_STRIP = [
    re.compile(r"remind\s+me\s+(?:to\s+)?", re.I),
    re.compile(r"set\s+(?:a\s+)?reminder\s+(?:to\s+)?", re.I),
    re.compile(r"in\s+\d+\s*(?:minute|hour|min|hr|m|h)s?", re.I),
    re.compile(r"at\s+\d{1,2}(?::\d{2})?\s*(?:am|pm)?", re.I),
    re.compile(r"tomorrow|today|tonight", re.I),
]

# fixed clock times for vague expressions
_DAYPART_TIMES = {
    "tomorrow": time(9, 0),
    "tonight": time(21, 0),
    "in the morning": time(9, 0),
    "in the evening": time(18, 0),
}


def _extract_time_text(lower_text: str) -> str:
    match = _IN_MINUTES.search(lower_text)
    if match:
        return f"in {match.group(1)} minutes"
    match = _IN_HOURS.search(lower_text)
    if match:
        return f"in {match.group(1)} hours"
    match = _AT_TIME.search(lower_text)
    if match:
        clock = match.group(1) + (f":{match.group(2)}" if match.group(2) else "")
        return f"at {clock}{match.group(3) or ''}"
    if "tomorrow" in lower_text:
        return "tomorrow"
    if "tonight" in lower_text:
        return "tonight"
    if "morning" in lower_text:
        return "in the morning"
    if "evening" in lower_text:
        return "in the evening"
    return ""


def detect_reminder_intent(text: str) -> ReminderIntent:
    lower_text = text.lower().strip()

    has_keyword = any(kw in lower_text for kw in _REMINDER_KEYWORDS)
    has_health = any(kw in lower_text for kw in _HEALTH_KEYWORDS)
    has_time = any(p.search(lower_text) for p in _TIME_PATTERNS)

    title = ""
    matched_pattern = False
    for pattern in _REMINDER_PATTERNS:
        match = pattern.search(lower_text)
        if match:
            matched_pattern = True
            title = (match.group(1) or "").strip()
            break

    if not title and (has_keyword or has_health):
        title = text
        for pattern in _TITLE_STRIP:
            title = pattern.sub("", title)
        title = " ".join(title.split())

    confidence = 0
    if has_keyword:
        confidence += 40
    if has_time:
        confidence += 30
    if matched_pattern:
        confidence += 20
    if has_health and has_time:
        confidence += 10

    return ReminderIntent(
        is_reminder=confidence >= 50 or (has_keyword and has_time),
        title=title or text[:50],
        time_text=_extract_time_text(lower_text),
        confidence=min(confidence, 100),
    )


def resolve_due_at(time_text: str, now: datetime, user_timezone: str = "UTC") -> datetime | None:
    """Turn a normalised time expression into an absolute, aware datetime.

    Clock times are read in the user's timezone; a clock time that already
    passed today rolls over to tomorrow. Returns None for anything else.
    """
    text = time_text.strip().lower()
    if not text:
        return None

    match = re.fullmatch(r"in (\d+) minutes", text)
    if match:
        return now + timedelta(minutes=int(match.group(1)))
    match = re.fullmatch(r"in (\d+) hours", text)
    if match:
        return now + timedelta(hours=int(match.group(1)))

    local_now = now.astimezone(ZoneInfo(user_timezone))

    match = re.fullmatch(r"at (\d{1,2})(?::(\d{2}))?\s*(am|pm)?", text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        meridiem = match.group(3)
        if meridiem == "pm" and hour < 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0
        if hour > 23 or minute > 59:
            return None
        candidate = local_now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        if candidate <= local_now:
            candidate += timedelta(days=1)
        return candidate

    daypart = _DAYPART_TIMES.get(text)
    if daypart is None:
        return None
    day = local_now.date() + timedelta(days=1) if text == "tomorrow" else local_now.date()
    candidate = datetime.combine(day, daypart, tzinfo=local_now.tzinfo)
    if candidate <= local_now:
        candidate += timedelta(days=1)
    return candidate
