"""Chat transcript store: one row per message appended by the user or by Aura."""

import json
from typing import Any

from ulid import ULID

import aura.storage.db_config as db_config
from aura.datamodel import Sender
from aura.logger import logger

__all__ = [
    "create_message",
    "get_recent_messages",
]

_SENDERS = frozenset(s.value for s in Sender)


def _ensure_conn():
    if db_config.conn is None:
        raise RuntimeError("Database is not initialised, call init_db() first")

def _parse_metadata(raw: str | None) -> dict[str, Any] | None:
    if not raw or not raw.strip():
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored message metadata is not valid JSON, ignoring it")
        return None
    return value if isinstance(value, dict) else None

def _row_to_message(row) -> dict[str, Any]:
    message_id, owner_id, sender, content, metadata, created_at_utc = row
    return {
        "message_id": message_id,
        "owner_id": owner_id,
        "sender": sender,
        "content": content,
        "metadata": _parse_metadata(metadata),
        "created_at_utc": created_at_utc,
    }


async def create_message(
    owner_id: str | None,
    sender: Sender | str,
    content: str,
    metadata: dict[str, Any] | None = None,
) -> str:
    """Append a message to the owner's transcript, returns the message ID ("" if rejected)"""
    _ensure_conn()
    sender_value = sender.value if isinstance(sender, Sender) else str(sender)
    if sender_value not in _SENDERS:
        logger.error(f"Invalid message sender: {sender_value}, message not stored")
        return ""

    message_id = str(ULID())
    await db_config.conn.execute(
        "INSERT INTO messages (message_id, owner_id, sender, content, metadata) VALUES (?, ?, ?, ?, ?)",
        (
            message_id,
            owner_id,
            sender_value,
            content,
            json.dumps(metadata, ensure_ascii=False) if metadata is not None else None,
        )
    )
    await db_config.conn.commit()
    logger.trace(f"Stored message: message_id={message_id}, owner_id={owner_id}, sender={sender_value}")
    return message_id

async def get_recent_messages(owner_id: str, limit: int = 50) -> list[dict]:
    """Newest messages of an owner first. Ordered by insertion, since ULIDs of one millisecond are unordered"""
    _ensure_conn()
    async with db_config.conn.execute(
        "SELECT message_id, owner_id, sender, content, metadata, created_at_utc "
        "FROM messages WHERE owner_id = ? ORDER BY rowid DESC LIMIT ?",
        (owner_id, limit)
    ) as cursor:
        rows = await cursor.fetchall()
    return [_row_to_message(row) for row in rows]
