"""Tests for the SQLite stores, run against a temporary database file."""

from datetime import timedelta

import pytest

import aura.storage.message as message_storage
import aura.storage.reminder as reminder_storage
from aura.core.companion import save_chat_message
from aura.datamodel import ChatMessage, Sender

from fakes import NOW, temp_db


class TestReminderStore:
    @pytest.mark.asyncio
    async def test_due_window_is_inclusive_and_owner_scoped(self, tmp_path):
        async with temp_db(tmp_path / "aura.db"):
            edge_start = await reminder_storage.create_reminder("U1", "edge start", NOW - timedelta(minutes=5))
            edge_end = await reminder_storage.create_reminder("U1", "edge end", NOW)
            await reminder_storage.create_reminder("U1", "too old", NOW - timedelta(minutes=5, seconds=1))
            await reminder_storage.create_reminder("U1", "future", NOW + timedelta(seconds=1))
            await reminder_storage.create_reminder("U2", "someone else", NOW - timedelta(minutes=1))

            due = await reminder_storage.fetch_due_reminders("U1", NOW - timedelta(minutes=5), NOW)

            assert [r.reminder_id for r in due] == [edge_start.reminder_id, edge_end.reminder_id]
            assert due[1].due_at == NOW
            assert all(r.active for r in due)

    @pytest.mark.asyncio
    async def test_window_bounds_keep_sub_second_precision(self, tmp_path):
        now = NOW + timedelta(minutes=5, milliseconds=700)
        window = timedelta(minutes=5)
        async with temp_db(tmp_path / "aura.db"):
            await reminder_storage.create_reminder("U1", "stale", now - window - timedelta(milliseconds=500))
            await reminder_storage.create_reminder("U1", "early", now + timedelta(milliseconds=200))
            fresh = await reminder_storage.create_reminder("U1", "fresh", now - window)

            due = await reminder_storage.fetch_due_reminders("U1", now - window, now)

            assert [r.text for r in due] == ["fresh"]
            assert due[0].due_at == fresh.due_at == now - window

    @pytest.mark.asyncio
    async def test_mark_inactive_is_one_way(self, tmp_path):
        async with temp_db(tmp_path / "aura.db"):
            record = await reminder_storage.create_reminder("U1", "stretch", NOW - timedelta(minutes=1))

            assert await reminder_storage.mark_inactive(record.reminder_id) is True
            assert await reminder_storage.mark_inactive(record.reminder_id) is False
            assert await reminder_storage.mark_inactive("missing") is False
            assert await reminder_storage.fetch_due_reminders("U1", NOW - timedelta(minutes=5), NOW) == []

    @pytest.mark.asyncio
    async def test_active_reminders_and_cancel(self, tmp_path):
        async with temp_db(tmp_path / "aura.db"):
            later = await reminder_storage.create_reminder("U1", "later", NOW + timedelta(hours=2))
            sooner = await reminder_storage.create_reminder("U1", "sooner", NOW + timedelta(hours=1))

            active = await reminder_storage.get_active_reminders("U1")
            assert [r.text for r in active] == ["sooner", "later"]

            assert await reminder_storage.cancel_reminder("U2", sooner.reminder_id) is False
            assert await reminder_storage.cancel_reminder("U1", sooner.reminder_id) is True
            assert [r.reminder_id for r in await reminder_storage.get_active_reminders("U1")] == [later.reminder_id]

    @pytest.mark.asyncio
    async def test_schema_survives_reopen(self, tmp_path):
        path = tmp_path / "aura.db"
        async with temp_db(path):
            record = await reminder_storage.create_reminder("U1", "persisted", NOW)
        async with temp_db(path):
            active = await reminder_storage.get_active_reminders("U1")

        assert [r.reminder_id for r in active] == [record.reminder_id]

    @pytest.mark.asyncio
    async def test_store_requires_initialised_database(self):
        with pytest.raises(RuntimeError):
            await reminder_storage.fetch_due_reminders("U1", NOW - timedelta(minutes=5), NOW)


class TestMessageStore:
    @pytest.mark.asyncio
    async def test_recent_messages_newest_first(self, tmp_path):
        async with temp_db(tmp_path / "aura.db"):
            await message_storage.create_message("U1", Sender.USER, "remind me to stretch in 5 minutes")
            await message_storage.create_message("U1", Sender.AURA, "Got it", metadata={"kind": "confirmation"})
            await message_storage.create_message("U2", Sender.USER, "not mine")

            messages = await message_storage.get_recent_messages("U1")

            assert [m["content"] for m in messages] == ["Got it", "remind me to stretch in 5 minutes"]
            assert messages[0]["sender"] == "aura"
            assert messages[0]["metadata"] == {"kind": "confirmation"}
            assert messages[1]["metadata"] is None

    @pytest.mark.asyncio
    async def test_invalid_sender_is_not_stored(self, tmp_path):
        async with temp_db(tmp_path / "aura.db"):
            assert await message_storage.create_message("U1", "system", "hello") == ""
            assert await message_storage.get_recent_messages("U1") == []

    @pytest.mark.asyncio
    async def test_bus_handler_persists_chat_messages(self, tmp_path):
        async with temp_db(tmp_path / "aura.db"):
            await save_chat_message(ChatMessage(owner_id="U1", content="Reminder time! stretch"))

            messages = await message_storage.get_recent_messages("U1")
            assert [(m["sender"], m["content"]) for m in messages] == [("aura", "Reminder time! stretch")]
