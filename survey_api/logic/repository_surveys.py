"""Survey data access helpers.

Keeps SQL for the ``surveys`` table out of the service modules. Every helper
takes the connection of the caller's transaction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from survey_api.logic.serialization import row_to_dict

_SURVEY_COLUMNS = "id, name, description, version, status, created_at, locked_at, created_by, is_deleted"


def get_survey(conn: Connection, survey_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        sql_text(f"SELECT {_SURVEY_COLUMNS} FROM surveys WHERE id = :sid"),
        {"sid": survey_id},
    ).mappings().fetchone()
    return row_to_dict(row) if row else None


def list_surveys(conn: Connection, *, include_deleted: bool = False) -> List[Dict[str, Any]]:
    query = f"SELECT {_SURVEY_COLUMNS} FROM surveys"
    params: Dict[str, Any] = {}
    if not include_deleted:
        query += " WHERE is_deleted = :deleted"
        params["deleted"] = False
    rows = conn.execute(sql_text(query + " ORDER BY id ASC"), params).mappings().all()
    return [row_to_dict(r) for r in rows]


def name_in_use(conn: Connection, name: str) -> bool:
    row = conn.execute(
        sql_text("SELECT 1 FROM surveys WHERE name = :name LIMIT 1"),
        {"name": name},
    ).fetchone()
    return row is not None


def max_version(conn: Connection, name: str) -> int:
    row = conn.execute(
        sql_text("SELECT COALESCE(MAX(version), 0) FROM surveys WHERE name = :name"),
        {"name": name},
    ).fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def insert_survey(
    conn: Connection,
    *,
    name: str,
    description: Optional[str],
    version: int,
    created_by: int,
) -> int:
    """Insert a survey (status defaults to UNLOCKED) and return its id."""
    new_id = conn.execute(
        sql_text(
            """
            INSERT INTO surveys (name, description, version, created_by)
            VALUES (:name, :description, :version, :created_by)
            RETURNING id
            """
        ),
        {"name": name, "description": description, "version": int(version), "created_by": created_by},
    ).scalar_one()
    return int(new_id)


def update_description(conn: Connection, survey_id: int, description: Optional[str]) -> None:
    conn.execute(
        sql_text("UPDATE surveys SET description = :description WHERE id = :sid"),
        {"description": description, "sid": survey_id},
    )


def mark_locked(conn: Connection, survey_id: int) -> None:
    conn.execute(
        sql_text("UPDATE surveys SET status = :status, locked_at = CURRENT_TIMESTAMP WHERE id = :sid"),
        {"status": "LOCKED", "sid": survey_id},
    )


def mark_deleted(conn: Connection, survey_id: int) -> Dict[str, int]:
    """Soft-delete a survey with its active questions, their links and its CUSTOM options.

    Returns the number of rows flagged per table.
    """
    params = {"sid": survey_id, "deleted": True, "active": False}
    links = conn.execute(
        sql_text(
            """
            UPDATE question_option SET is_deleted = :deleted
            WHERE is_deleted = :active
              AND question_id IN (
                SELECT id FROM questions WHERE survey_id = :sid AND is_deleted = :active
              )
            """
        ),
        params,
    ).rowcount
    questions = conn.execute(
        sql_text("UPDATE questions SET is_deleted = :deleted WHERE survey_id = :sid AND is_deleted = :active"),
        params,
    ).rowcount
    options = conn.execute(
        sql_text(
            "UPDATE options SET is_deleted = :deleted "
            "WHERE survey_id = :sid AND type = :custom AND is_deleted = :active"
        ),
        {**params, "custom": "CUSTOM"},
    ).rowcount
    conn.execute(
        sql_text("UPDATE surveys SET is_deleted = :deleted WHERE id = :sid"),
        params,
    )
    return {
        "questions": int(questions or 0),
        "links": int(links or 0),
        "options": int(options or 0),
    }


__all__ = [
    "get_survey",
    "list_surveys",
    "name_in_use",
    "max_version",
    "insert_survey",
    "update_description",
    "mark_locked",
    "mark_deleted",
]
