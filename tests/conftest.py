"""Pytest configuration and fixtures for the Aura tests."""

from datetime import timedelta

import pytest

from aura.datamodel import ReminderRecord

from fakes import NOW, ChatRecorder, FakeReminderStore, FixedClock


@pytest.fixture
def clock():
    """A clock frozen at NOW; tests move it by assigning clock.now."""
    return FixedClock(NOW)


@pytest.fixture
def chat():
    return ChatRecorder()


@pytest.fixture
def due_record():
    """Owner U1's reminder that fell due two minutes ago."""
    return ReminderRecord(
        reminder_id="r1",
        owner_id="U1",
        text="drink water",
        due_at=NOW - timedelta(minutes=2),
    )


@pytest.fixture
def store(due_record):
    return FakeReminderStore([due_record])
