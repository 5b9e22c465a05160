"""Log storage: create/find/update/delete by id and by owning baby."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .db import from_db_time, get_connection, now_iso, to_db_time
from .schemas import CreateLogPayload, Log, LogType, UpdateLogPayload, as_utc

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("type", "start_time", "end_time", "amount", "unit", "notes", "metadata")


def _row_to_log(row) -> Log:
    return Log(
        id=row["id"],
        baby_id=row["baby_id"],
        type=LogType(row["type"]),
        start_time=from_db_time(row["start_time"]),
        end_time=from_db_time(row["end_time"]),
        amount=row["amount"],
        unit=row["unit"],
        raw_transcript=row["raw_transcript"],
        notes=row["notes"],
        metadata=json.loads(row["metadata"]) if row["metadata"] else None,
        created_at=from_db_time(row["created_at"]),
        updated_at=from_db_time(row["updated_at"]),
    )


def _dump_metadata(metadata: Optional[Dict[str, Any]]) -> Optional[str]:
    return json.dumps(metadata, ensure_ascii=False) if metadata else None


def create_log(payload: CreateLogPayload) -> Log:
    if not payload.baby_id:
        raise ValueError("baby_id is required")
    log_id = str(uuid4())
    now = now_iso()
    with get_connection() as conn:
        conn.execute(
            """
            INSERT INTO logs (
                id,
                baby_id,
                type,
                start_time,
                end_time,
                amount,
                unit,
                raw_transcript,
                notes,
                metadata,
                created_at,
                updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                log_id,
                payload.baby_id,
                payload.type.value,
                to_db_time(payload.start_time),
                to_db_time(payload.end_time) if payload.end_time else None,
                payload.amount,
                payload.unit,
                payload.raw_transcript,
                payload.notes,
                _dump_metadata(payload.metadata),
                now,
                now,
            ),
        )
        conn.commit()
    return get_log(log_id)


def find_log(log_id: str) -> Optional[Log]:
    with get_connection() as conn:
        row = conn.execute("SELECT * FROM logs WHERE id = ?", (log_id,)).fetchone()
    return _row_to_log(row) if row else None


def get_log(log_id: str) -> Log:
    log = find_log(log_id)
    if log is None:
        raise ValueError(f"Log {log_id} not found")
    return log


def list_logs(
    baby_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    *,
    end_exclusive: bool = False,
    newest_first: bool = True,
    log_type: Optional[LogType] = None,
) -> List[Log]:
    query = "SELECT * FROM logs WHERE baby_id = ?"
    params: list = [baby_id]
    if log_type is not None:
        query += " AND type = ?"
        params.append(log_type.value)
    if start is not None:
        query += " AND start_time >= ?"
        params.append(to_db_time(start))
    if end is not None:
        query += " AND start_time < ?" if end_exclusive else " AND start_time <= ?"
        params.append(to_db_time(end))
    query += " ORDER BY start_time DESC" if newest_first else " ORDER BY start_time ASC"
    with get_connection() as conn:
        rows = conn.execute(query, tuple(params)).fetchall()
    return [_row_to_log(row) for row in rows]


def list_logs_by_type(
    baby_id: str,
    log_type: LogType,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Log]:
    return list_logs(baby_id, start, end, log_type=log_type)


def update_log(log_id: str, payload: UpdateLogPayload) -> Log:
    current = get_log(log_id)
    changes = {
        name: getattr(payload, name)
        for name in _UPDATABLE_FIELDS
        if name in payload.model_fields_set
    }
    if not changes:
        return current

    start_time = changes.get("start_time", current.start_time)
    if start_time is None:
        raise ValueError("startTime cannot be cleared")
    end_time = changes.get("end_time", current.end_time)
    if end_time is not None and as_utc(end_time) < as_utc(start_time):
        raise ValueError("endTime must not be earlier than startTime")
    if "type" in changes and changes["type"] is None:
        raise ValueError("type cannot be cleared")

    columns = {
        "type": lambda value: value.value,
        "start_time": to_db_time,
        "end_time": lambda value: to_db_time(value) if value else None,
        "metadata": _dump_metadata,
    }
    assignments = []
    params: list = []
    for name, value in changes.items():
        assignments.append(f"{name} = ?")
        params.append(columns[name](value) if name in columns else value)
    assignments.append("updated_at = ?")
    params.append(now_iso())
    params.append(log_id)

    with get_connection() as conn:
        conn.execute(f"UPDATE logs SET {', '.join(assignments)} WHERE id = ?", tuple(params))
        conn.commit()
    logger.info("log updated", extra={"log_id": log_id, "fields": sorted(changes)})
    return get_log(log_id)


def delete_log(log_id: str) -> None:
    with get_connection() as conn:
        cursor = conn.execute("DELETE FROM logs WHERE id = ?", (log_id,))
        conn.commit()
    if cursor.rowcount == 0:
        raise ValueError(f"Log {log_id} not found")


class LogStore:
    """Storage collaborator handed to services; wraps the module functions above."""

    def create_log(self, payload: CreateLogPayload) -> Log:
        return create_log(payload)

    def find_log(self, log_id: str) -> Optional[Log]:
        return find_log(log_id)

    def list_logs(
        self,
        baby_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        **kwargs: Any,
    ) -> List[Log]:
        return list_logs(baby_id, start, end, **kwargs)

    def update_log(self, log_id: str, payload: UpdateLogPayload) -> Log:
        return update_log(log_id, payload)

    def delete_log(self, log_id: str) -> None:
        delete_log(log_id)
