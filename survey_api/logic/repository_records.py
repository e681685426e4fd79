"""Record data access helpers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from survey_api.logic.serialization import row_to_dict

_RECORD_COLUMNS = (
    "id, survey_id, created_by, created_at, submitted_at, subject_name, subject_description, is_deleted"
)


def get_record(conn: Connection, record_id: int) -> Optional[Dict[str, Any]]:
    """Return an active (not deleted) record, or None."""
    row = conn.execute(
        sql_text(f"SELECT {_RECORD_COLUMNS} FROM records WHERE id = :rid AND is_deleted = :deleted"),
        {"rid": record_id, "deleted": False},
    ).mappings().fetchone()
    return row_to_dict(row) if row else None


def list_records(conn: Connection, survey_id: int, *, created_by: Optional[int] = None) -> List[Dict[str, Any]]:
    query = f"SELECT {_RECORD_COLUMNS} FROM records WHERE survey_id = :sid AND is_deleted = :deleted"
    params: Dict[str, Any] = {"sid": survey_id, "deleted": False}
    if created_by is not None:
        query += " AND created_by = :uid"
        params["uid"] = created_by
    rows = conn.execute(sql_text(query + " ORDER BY id ASC"), params).mappings().all()
    return [row_to_dict(r) for r in rows]


def insert_record(
    conn: Connection,
    *,
    survey_id: int,
    created_by: int,
    subject_name: str,
    subject_description: str,
) -> int:
    new_id = conn.execute(
        sql_text(
            """
            INSERT INTO records (survey_id, created_by, subject_name, subject_description)
            VALUES (:sid, :uid, :subject_name, :subject_description)
            RETURNING id
            """
        ),
        {
            "sid": survey_id,
            "uid": created_by,
            "subject_name": subject_name,
            "subject_description": subject_description,
        },
    ).scalar_one()
    return int(new_id)


def mark_submitted(conn: Connection, record_id: int) -> None:
    conn.execute(
        sql_text("UPDATE records SET submitted_at = CURRENT_TIMESTAMP WHERE id = :rid"),
        {"rid": record_id},
    )


def mark_deleted(conn: Connection, record_id: int) -> None:
    conn.execute(
        sql_text("UPDATE records SET is_deleted = :deleted WHERE id = :rid"),
        {"deleted": True, "rid": record_id},
    )


__all__ = ["get_record", "list_records", "insert_record", "mark_submitted", "mark_deleted"]
