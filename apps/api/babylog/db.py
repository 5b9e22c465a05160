"""SQLite helpers."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from .config import CONFIG
from .schemas import as_utc

_DB_PATH = CONFIG.resolved_database_path
_DB_PATH.parent.mkdir(parents=True, exist_ok=True)


def initialize_db() -> None:
    with sqlite3.connect(_DB_PATH) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT,
                created_at TEXT NOT NULL
            );
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS babies (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                birth_date TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_babies (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                baby_id TEXT NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE(user_id, baby_id),
                FOREIGN KEY (user_id) REFERENCES users(id),
                FOREIGN KEY (baby_id) REFERENCES babies(id)
            );
            """
        )

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id TEXT PRIMARY KEY,
                baby_id TEXT NOT NULL,
                type TEXT NOT NULL CHECK (type IN ('FEEDING', 'SLEEP', 'DIAPER', 'NOTE')),
                start_time TEXT NOT NULL,
                end_time TEXT,
                amount REAL,
                unit TEXT,
                raw_transcript TEXT NOT NULL,
                notes TEXT,
                metadata TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (baby_id) REFERENCES babies(id)
            );
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS logs_baby_start_idx
            ON logs (baby_id, start_time)
            """
        )

        conn.commit()


@contextmanager
def get_connection() -> Iterator[sqlite3.Connection]:
    conn = sqlite3.connect(_DB_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def to_db_time(value: datetime) -> str:
    """Store every timestamp as UTC with a fixed layout so text comparison orders correctly."""
    return as_utc(value).isoformat(timespec="microseconds")


def from_db_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def now_iso() -> str:
    return to_db_time(datetime.now(tz=timezone.utc))
