"""Tests for reminder intent detection and due-time resolution."""

from datetime import datetime, timedelta, timezone

import pytest

from aura.core.intent import detect_reminder_intent, resolve_due_at

from fakes import NOW


class TestDetectReminderIntent:
    def test_full_request_scores_high(self):
        intent = detect_reminder_intent("Remind me to drink water in 10 minutes")

        assert intent.is_reminder is True
        assert intent.title == "drink water"
        assert intent.time_text == "in 10 minutes"
        assert intent.confidence == 100

    def test_clock_time_is_normalised(self):
        intent = detect_reminder_intent("set a reminder to call mom at 7:30 pm")

        assert intent.is_reminder is True
        assert intent.title == "call mom"
        assert intent.time_text == "at 7:30pm"

    def test_keyword_and_time_are_enough(self):
        intent = detect_reminder_intent("ping me tomorrow about the report")

        assert intent.is_reminder is True
        assert intent.time_text == "tomorrow"

    def test_small_talk_is_not_a_reminder(self):
        intent = detect_reminder_intent("what's the weather like")

        assert intent.is_reminder is False
        assert intent.confidence == 0

    def test_health_talk_without_request_stays_below_threshold(self):
        intent = detect_reminder_intent("I went for a walk this morning")

        assert intent.is_reminder is False
        assert intent.confidence == 40

    def test_confidence_is_capped(self):
        assert detect_reminder_intent("remind me to take my pill in 5 min").confidence <= 100


class TestResolveDueAt:
    @pytest.mark.parametrize(
        "time_text, expected",
        [
            ("in 10 minutes", NOW + timedelta(minutes=10)),
            ("in 2 hours", NOW + timedelta(hours=2)),
            ("at 5pm", datetime(2026, 10, 18, 17, 0, tzinfo=timezone.utc)),
            ("at 9am", datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)),
            ("at 12am", datetime(2026, 10, 19, 0, 0, tzinfo=timezone.utc)),
            ("at 14:30", datetime(2026, 10, 18, 14, 30, tzinfo=timezone.utc)),
            ("tomorrow", datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)),
            ("tonight", datetime(2026, 10, 18, 21, 0, tzinfo=timezone.utc)),
            ("in the morning", datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)),
            ("in the evening", datetime(2026, 10, 18, 18, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_resolves_in_utc(self, time_text, expected):
        assert resolve_due_at(time_text, NOW) == expected

    def test_past_clock_time_rolls_to_tomorrow(self):
        assert resolve_due_at("at 14:00", NOW) == NOW + timedelta(days=1)

    def test_clock_time_is_read_in_user_timezone(self):
        # 14:00 UTC is 19:30 in Kolkata
        due = resolve_due_at("at 8pm", NOW, "Asia/Kolkata")

        assert due == datetime(2026, 10, 18, 14, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("time_text", ["", "someday", "at 25", "at 7:75"])
    def test_unrecognised_times_give_none(self, time_text):
        assert resolve_due_at(time_text, NOW) is None
