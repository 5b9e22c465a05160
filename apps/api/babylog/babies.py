"""Babies and the user <-> baby ownership join."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional
from uuid import uuid4

from .db import from_db_time, get_connection, now_iso
from .schemas import Baby

logger = logging.getLogger(__name__)


def _row_to_baby(row) -> Baby:
    return Baby(
        id=row["id"],
        name=row["name"],
        birth_date=date.fromisoformat(row["birth_date"]),
        created_at=from_db_time(row["created_at"]),
        updated_at=from_db_time(row["updated_at"]),
    )


def ensure_user(user_id: str, email: Optional[str] = None) -> None:
    with get_connection() as conn:
        conn.execute(
            """
            INSERT INTO users (id, email, created_at)
            VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET email = COALESCE(excluded.email, users.email)
            """,
            (user_id, email, now_iso()),
        )
        conn.commit()


def add_baby_owner(baby_id: str, user_id: str) -> None:
    with get_connection() as conn:
        conn.execute(
            """
            INSERT OR IGNORE INTO user_babies (id, user_id, baby_id, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (str(uuid4()), user_id, baby_id, now_iso()),
        )
        conn.commit()


def create_baby(user_id: str, *, name: str, birth_date: date) -> Baby:
    baby_id = str(uuid4())
    now = now_iso()
    with get_connection() as conn:
        conn.execute(
            """
            INSERT INTO babies (id, name, birth_date, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (baby_id, name, birth_date.isoformat(), now, now),
        )
        conn.execute(
            """
            INSERT INTO user_babies (id, user_id, baby_id, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (str(uuid4()), user_id, baby_id, now),
        )
        conn.commit()
    logger.info("baby created", extra={"baby_id": baby_id, "user_id": user_id})
    return get_baby(baby_id)


def get_baby(baby_id: str) -> Baby:
    with get_connection() as conn:
        row = conn.execute("SELECT * FROM babies WHERE id = ?", (baby_id,)).fetchone()
    if not row:
        raise ValueError(f"Baby {baby_id} not found")
    return _row_to_baby(row)


def list_babies_for_user(user_id: str) -> List[Baby]:
    with get_connection() as conn:
        rows = conn.execute(
            """
            SELECT b.*
            FROM babies b
            JOIN user_babies ub ON ub.baby_id = b.id
            WHERE ub.user_id = ?
            ORDER BY b.created_at ASC
            """,
            (user_id,),
        ).fetchall()
    return [_row_to_baby(row) for row in rows]


def get_baby_for_user(baby_id: str, user_id: str) -> Optional[Baby]:
    """Return the baby only when ``user_id`` owns it; doubles as the access check."""
    with get_connection() as conn:
        row = conn.execute(
            """
            SELECT b.*
            FROM babies b
            JOIN user_babies ub ON ub.baby_id = b.id
            WHERE ub.user_id = ? AND b.id = ?
            """,
            (user_id, baby_id),
        ).fetchone()
    return _row_to_baby(row) if row else None


def user_can_access_baby(baby_id: str, user_id: str) -> bool:
    return get_baby_for_user(baby_id, user_id) is not None


def update_baby(
    baby_id: str,
    user_id: str,
    *,
    name: Optional[str] = None,
    birth_date: Optional[date] = None,
) -> Optional[Baby]:
    if not user_can_access_baby(baby_id, user_id):
        return None
    with get_connection() as conn:
        conn.execute(
            """
            UPDATE babies
            SET name = COALESCE(?, name),
                birth_date = COALESCE(?, birth_date),
                updated_at = ?
            WHERE id = ?
            """,
            (name, birth_date.isoformat() if birth_date else None, now_iso(), baby_id),
        )
        conn.commit()
    return get_baby(baby_id)


def delete_baby_for_user(baby_id: str, user_id: str) -> bool:
    """Drop the user's ownership; the last owner leaving removes the baby and its logs."""
    with get_connection() as conn:
        cursor = conn.execute(
            "DELETE FROM user_babies WHERE user_id = ? AND baby_id = ?",
            (user_id, baby_id),
        )
        if cursor.rowcount == 0:
            return False
        remaining = conn.execute(
            "SELECT COUNT(*) FROM user_babies WHERE baby_id = ?",
            (baby_id,),
        ).fetchone()[0]
        if remaining == 0:
            conn.execute("DELETE FROM logs WHERE baby_id = ?", (baby_id,))
            conn.execute("DELETE FROM babies WHERE id = ?", (baby_id,))
        conn.commit()
    logger.info(
        "baby relation removed",
        extra={"baby_id": baby_id, "user_id": user_id, "baby_deleted": remaining == 0},
    )
    return True
