import aiosqlite
import os
from pathlib import Path

from aura.logger import logger

_SQL_DIR = Path(__file__).with_name("sql")
SCHEMA_VERSION = 1

conn: aiosqlite.Connection | None = None


async def init_db(db_path: str) -> None:
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        os.makedirs(db_dir, exist_ok=True)
    global conn
    conn = await aiosqlite.connect(db_path)

    async with conn.execute("PRAGMA user_version") as cursor:
        row = await cursor.fetchone()
        user_version = row[0]

    if user_version == 0:
        init_sql = (_SQL_DIR / "db_init_v1.sql").read_text(encoding="utf-8")
        await conn.executescript(init_sql)
        await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        logger.info(f"Initialised database schema v1: {db_path}")

    # further migrations go here, keyed on user_version
    await conn.commit()


async def close_db() -> None:
    global conn
    if conn is not None:
        await conn.close()
        conn = None


__all__ = ["conn", "init_db", "close_db", "SCHEMA_VERSION"]
