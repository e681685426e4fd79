"""Question-related repository helpers.

Encapsulates reads and writes of the ``questions`` table used by authoring,
versioning and collection. Index arithmetic is not done here; it belongs to
the ordering engine and its SQL sibling stores.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from survey_api.logic.serialization import row_to_dict

_QUESTION_COLUMNS = (
    'id, survey_id, description, note, mandatory, type, attachments, is_deleted, created_at, "index"'
)


def get_question(conn: Connection, survey_id: int, question_id: int) -> Optional[Dict[str, Any]]:
    """Return an active question of the survey, or None."""
    row = conn.execute(
        sql_text(
            f"SELECT {_QUESTION_COLUMNS} FROM questions "
            "WHERE id = :qid AND survey_id = :sid AND is_deleted = :deleted"
        ),
        {"qid": question_id, "sid": survey_id, "deleted": False},
    ).mappings().fetchone()
    return row_to_dict(row) if row else None


def list_active_questions(conn: Connection, survey_id: int) -> List[Dict[str, Any]]:
    """Active questions of a survey ordered by index (tie-breaker by id)."""
    rows = conn.execute(
        sql_text(
            f"SELECT {_QUESTION_COLUMNS} FROM questions "
            'WHERE survey_id = :sid AND is_deleted = :deleted ORDER BY "index" ASC, id ASC'
        ),
        {"sid": survey_id, "deleted": False},
    ).mappings().all()
    return [row_to_dict(r) for r in rows]


def insert_question(
    conn: Connection,
    *,
    survey_id: int,
    description: str,
    note: Optional[str],
    mandatory: bool,
    type: str,
    attachments: bool,
    index: int,
) -> int:
    new_id = conn.execute(
        sql_text(
            """
            INSERT INTO questions (survey_id, description, note, mandatory, type, attachments, "index")
            VALUES (:sid, :description, :note, :mandatory, :type, :attachments, :idx)
            RETURNING id
            """
        ),
        {
            "sid": survey_id,
            "description": description,
            "note": note,
            "mandatory": bool(mandatory),
            "type": type,
            "attachments": bool(attachments),
            "idx": int(index),
        },
    ).scalar_one()
    return int(new_id)


def update_question(conn: Connection, question_id: int, changes: Dict[str, Any]) -> None:
    """Apply a partial update; keys are restricted to editable columns."""
    editable = ("description", "note", "mandatory", "type", "attachments")
    assignments = [f"{col} = :{col}" for col in editable if col in changes]
    if not assignments:
        return
    params = {col: changes[col] for col in editable if col in changes}
    params["qid"] = question_id
    conn.execute(
        sql_text(f"UPDATE questions SET {', '.join(assignments)} WHERE id = :qid"),
        params,
    )


def delete_links_of_question(conn: Connection, question_id: int) -> int:
    result = conn.execute(
        sql_text(
            "UPDATE question_option SET is_deleted = :deleted WHERE question_id = :qid AND is_deleted = :active"
        ),
        {"deleted": True, "active": False, "qid": question_id},
    )
    return int(result.rowcount or 0)


__all__ = [
    "get_question",
    "list_active_questions",
    "insert_question",
    "update_question",
    "delete_links_of_question",
]
