"""In-memory collaborators shared by the test modules."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone

import aura.storage.db_config as db_config
from aura.datamodel import EnvironmentalContext, ReminderRecord, Sender

NOW = datetime(2026, 10, 18, 14, 0, tzinfo=timezone.utc)


class FakeReminderStore:
    """Applies the same filter the SQL query does: owner, active flag, due window."""

    def __init__(self, records=()):
        self.records: dict[str, ReminderRecord] = {r.reminder_id: r for r in records}
        self.fetch_calls: list[tuple[str, datetime, datetime]] = []
        self.marked: list[str] = []
        self.fail_fetch = False
        self.fail_mark = False
        self.raise_on_mark = False
        self.fetch_gate: asyncio.Event | None = None
        self.mark_gate: asyncio.Event | None = None
        self._next_id = 0

    async def fetch_due_reminders(self, owner_id, window_start, window_end):
        self.fetch_calls.append((owner_id, window_start, window_end))
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fail_fetch:
            raise ConnectionError("store unavailable")
        return [
            replace(r)
            for r in self.records.values()
            if r.owner_id == owner_id and r.active and window_start <= r.due_at <= window_end
        ]

    async def mark_inactive(self, reminder_id):
        self.marked.append(reminder_id)
        if self.mark_gate is not None:
            await self.mark_gate.wait()
        if self.raise_on_mark:
            raise ConnectionError("store unavailable")
        if self.fail_mark:
            return False
        record = self.records.get(reminder_id)
        if record is None or not record.active:
            return False
        record.active = False
        return True

    async def create_reminder(self, owner_id, text, due_at):
        self._next_id += 1
        record = ReminderRecord(
            reminder_id=f"new-{self._next_id}",
            owner_id=owner_id,
            text=text,
            due_at=due_at,
        )
        self.records[record.reminder_id] = record
        return replace(record)

    async def get_active_reminders(self, owner_id):
        return sorted(
            (replace(r) for r in self.records.values() if r.owner_id == owner_id and r.active),
            key=lambda r: r.due_at,
        )


class ChatRecorder:
    """Stands in for the transcript: remembers every appended message."""

    def __init__(self):
        self.messages: list[tuple[str, Sender]] = []

    def __call__(self, content: str, sender: Sender) -> None:
        self.messages.append((content, sender))

    @property
    def assistant_messages(self) -> list[str]:
        return [content for content, sender in self.messages if sender == Sender.AURA]


class FakeContextProvider:
    def __init__(self, context: EnvironmentalContext):
        self.context = context
        self.calls = 0

    async def fetch_environmental_context(self) -> EnvironmentalContext:
        self.calls += 1
        return self.context


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@asynccontextmanager
async def temp_db(path):
    await db_config.init_db(str(path))
    try:
        yield db_config.conn
    finally:
        await db_config.close_db()
