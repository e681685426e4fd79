"""Option and question-option link data access helpers."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import bindparam, text as sql_text
from sqlalchemy.engine import Connection

from survey_api.logic.serialization import row_to_dict

_OPTION_COLUMNS = "id, value, description, type, is_deleted, survey_id"


def get_option(conn: Connection, option_id: int) -> Optional[Dict[str, Any]]:
    """Return an active option, or None."""
    row = conn.execute(
        sql_text(f"SELECT {_OPTION_COLUMNS} FROM options WHERE id = :oid AND is_deleted = :deleted"),
        {"oid": option_id, "deleted": False},
    ).mappings().fetchone()
    return row_to_dict(row) if row else None


def insert_option(
    conn: Connection,
    *,
    value: str,
    description: str,
    type: str,
    survey_id: Optional[int],
) -> int:
    new_id = conn.execute(
        sql_text(
            """
            INSERT INTO options (value, description, type, survey_id)
            VALUES (:value, :description, :type, :sid)
            RETURNING id
            """
        ),
        {"value": value, "description": description, "type": type, "sid": survey_id},
    ).scalar_one()
    return int(new_id)


def search_system_options(conn: Connection, needle: str) -> List[Dict[str, Any]]:
    pattern = f"%{needle}%"
    rows = conn.execute(
        sql_text(
            f"SELECT {_OPTION_COLUMNS} FROM options "
            "WHERE type = :system AND is_deleted = :deleted "
            "AND (description LIKE :pattern OR value LIKE :pattern) "
            "ORDER BY id ASC"
        ),
        {"system": "SYSTEM", "deleted": False, "pattern": pattern},
    ).mappings().all()
    return [row_to_dict(r) for r in rows]


def list_active_custom_options(conn: Connection, survey_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        sql_text(
            f"SELECT {_OPTION_COLUMNS} FROM options "
            "WHERE survey_id = :sid AND type = :custom AND is_deleted = :deleted ORDER BY id ASC"
        ),
        {"sid": survey_id, "custom": "CUSTOM", "deleted": False},
    ).mappings().all()
    return [row_to_dict(r) for r in rows]


def get_link(conn: Connection, question_id: int, option_id: int) -> Optional[Dict[str, Any]]:
    """Return the link row for (question, option) whether active or not."""
    row = conn.execute(
        sql_text(
            'SELECT id, question_id, option_id, "index", is_deleted FROM question_option '
            "WHERE question_id = :qid AND option_id = :oid"
        ),
        {"qid": question_id, "oid": option_id},
    ).mappings().fetchone()
    return row_to_dict(row) if row else None


def insert_link(conn: Connection, *, question_id: int, option_id: int, index: int) -> int:
    new_id = conn.execute(
        sql_text(
            """
            INSERT INTO question_option (question_id, option_id, "index")
            VALUES (:qid, :oid, :idx)
            RETURNING id
            """
        ),
        {"qid": question_id, "oid": option_id, "idx": int(index)},
    ).scalar_one()
    return int(new_id)


def revive_link(conn: Connection, link_id: int, index: int) -> None:
    conn.execute(
        sql_text('UPDATE question_option SET is_deleted = :deleted, "index" = :idx WHERE id = :lid'),
        {"deleted": False, "idx": int(index), "lid": link_id},
    )


def list_links_with_options(conn: Connection, question_ids: Iterable[int]) -> List[Dict[str, Any]]:
    """Active links of the given questions joined to their options.

    Ordered by question then link index, ready to be grouped per question.
    """
    ids = [int(q) for q in question_ids]
    if not ids:
        return []
    stmt = sql_text(
        """
        SELECT qo.id AS link_id, qo.question_id, qo."index" AS "index",
               o.id AS option_id, o.value, o.description, o.type, o.survey_id
        FROM question_option qo
        JOIN options o ON o.id = qo.option_id
        WHERE qo.question_id IN :qids AND qo.is_deleted = :deleted
        ORDER BY qo.question_id ASC, qo."index" ASC, qo.id ASC
        """
    ).bindparams(bindparam("qids", expanding=True))
    rows = conn.execute(stmt, {"qids": ids, "deleted": False}).mappings().all()
    return [row_to_dict(r) for r in rows]


def linked_option_ids(conn: Connection, question_id: int) -> List[int]:
    rows = conn.execute(
        sql_text("SELECT option_id FROM question_option WHERE question_id = :qid AND is_deleted = :deleted"),
        {"qid": question_id, "deleted": False},
    ).fetchall()
    return [int(r[0]) for r in rows]


__all__ = [
    "get_option",
    "insert_option",
    "search_system_options",
    "list_active_custom_options",
    "get_link",
    "insert_link",
    "revive_link",
    "list_links_with_options",
    "linked_option_ids",
]
