"""Reminder store backed by SQLite.

Times are stored as UTC strings 'YYYY-MM-DD HH:MM:SS.ffffff', which compare
correctly as text, so the due-window filter runs inside the query.
"""

from datetime import datetime

from ulid import ULID

import aura.storage.db_config as db_config
from aura.datamodel import ReminderRecord
from aura.logger import logger
from aura.utils import from_utc_str, to_utc_str

__all__ = [
    "create_reminder",
    "fetch_due_reminders",
    "mark_inactive",
    "get_active_reminders",
    "cancel_reminder",
]

_COLUMNS = "reminder_id, owner_id, text, due_at_utc, active, created_at_utc"


def _ensure_conn():
    if db_config.conn is None:
        raise RuntimeError("Database is not initialised, call init_db() first")

def _row_to_record(row) -> ReminderRecord:
    return ReminderRecord(
        reminder_id=row[0],
        owner_id=row[1],
        text=row[2],
        due_at=from_utc_str(row[3]),
        active=bool(row[4]),
        created_at=from_utc_str(row[5]) if row[5] else None,
    )


async def create_reminder(owner_id: str, text: str, due_at: datetime) -> ReminderRecord:
    """Insert an active reminder and return it"""
    _ensure_conn()
    reminder_id = str(ULID())
    due_at_utc = to_utc_str(due_at)
    await db_config.conn.execute(
        "INSERT INTO reminders (reminder_id, owner_id, text, due_at_utc, active) VALUES (?, ?, ?, ?, 1)",
        (reminder_id, owner_id, text, due_at_utc)
    )
    await db_config.conn.commit()
    logger.trace(f"Created reminder: reminder_id={reminder_id}, owner_id={owner_id}, due_at_utc={due_at_utc}")
    return ReminderRecord(
        reminder_id=reminder_id,
        owner_id=owner_id,
        text=text,
        due_at=from_utc_str(due_at_utc),
        active=True,
    )


async def fetch_due_reminders(owner_id: str, window_start: datetime, window_end: datetime) -> list[ReminderRecord]:
    """Active reminders of `owner_id` with due time in [window_start, window_end]"""
    _ensure_conn()
    async with db_config.conn.execute(
        f"SELECT {_COLUMNS} FROM reminders "
        "WHERE owner_id = ? AND active = 1 AND due_at_utc >= ? AND due_at_utc <= ? "
        "ORDER BY due_at_utc, reminder_id",
        (owner_id, to_utc_str(window_start), to_utc_str(window_end))
    ) as cursor:
        rows = await cursor.fetchall()
    return [_row_to_record(row) for row in rows]


async def mark_inactive(reminder_id: str) -> bool:
    """Flip a reminder to inactive. Returns False when no active row matched"""
    _ensure_conn()
    cursor = await db_config.conn.execute(
        "UPDATE reminders SET active = 0, updated_at_utc = CURRENT_TIMESTAMP WHERE reminder_id = ? AND active = 1",
        (reminder_id,)
    )
    await db_config.conn.commit()
    updated = cursor.rowcount > 0
    logger.trace(f"Marked reminder inactive: reminder_id={reminder_id}, updated={updated}")
    return updated


async def get_active_reminders(owner_id: str) -> list[ReminderRecord]:
    """All still-active reminders of an owner, soonest first"""
    _ensure_conn()
    async with db_config.conn.execute(
        f"SELECT {_COLUMNS} FROM reminders WHERE owner_id = ? AND active = 1 ORDER BY due_at_utc, reminder_id",
        (owner_id,)
    ) as cursor:
        rows = await cursor.fetchall()
    return [_row_to_record(row) for row in rows]


async def cancel_reminder(owner_id: str, reminder_id: str) -> bool:
    """Cancel one of the owner's reminders; cancelling is the same one-way transition as firing"""
    _ensure_conn()
    cursor = await db_config.conn.execute(
        "UPDATE reminders SET active = 0, updated_at_utc = CURRENT_TIMESTAMP "
        "WHERE reminder_id = ? AND owner_id = ? AND active = 1",
        (reminder_id, owner_id)
    )
    await db_config.conn.commit()
    return cursor.rowcount > 0
