"""Answer data access helpers.

Answers are seeded blank, one per active question, when a record is created;
afterwards they are only ever updated in place. The (record_id, question_id)
unique constraint backs the one-answer-per-question invariant.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from survey_api.logic.serialization import dump_checkbox, row_to_dict

_ANSWER_COLUMNS = "a.id, a.record_id, a.question_id, a.text, a.radio, a.checkbox"


def seed_blank_answers(conn: Connection, record_id: int, question_ids: Iterable[int]) -> int:
    """Bulk-insert one blank answer per question; return how many were inserted."""
    rows = [
        {"rid": record_id, "qid": int(qid), "checkbox": dump_checkbox([])}
        for qid in question_ids
    ]
    if not rows:
        return 0
    conn.execute(
        sql_text(
            "INSERT INTO answers (record_id, question_id, text, radio, checkbox) "
            "VALUES (:rid, :qid, NULL, NULL, :checkbox)"
        ),
        rows,
    )
    return len(rows)


def list_answers(conn: Connection, record_id: int) -> List[Dict[str, Any]]:
    """Answers of a record with their question's type, in question order."""
    rows = conn.execute(
        sql_text(
            f"""
            SELECT {_ANSWER_COLUMNS}, q.type AS question_type, q.description AS question_description,
                   q.mandatory, q."index" AS question_index
            FROM answers a
            JOIN questions q ON q.id = a.question_id
            WHERE a.record_id = :rid
            ORDER BY q."index" ASC, a.id ASC
            """
        ),
        {"rid": record_id},
    ).mappings().all()
    return [row_to_dict(r) for r in rows]


def get_answer(conn: Connection, record_id: int, answer_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        sql_text(
            f"""
            SELECT {_ANSWER_COLUMNS}, q.type AS question_type
            FROM answers a
            JOIN questions q ON q.id = a.question_id
            WHERE a.id = :aid AND a.record_id = :rid
            """
        ),
        {"aid": answer_id, "rid": record_id},
    ).mappings().fetchone()
    return row_to_dict(row) if row else None


def update_answer(
    conn: Connection,
    *,
    record_id: int,
    question_id: int,
    answer_id: int,
    text: Optional[str],
    radio: Optional[int],
    checkbox: Optional[List[int]],
) -> int:
    result = conn.execute(
        sql_text(
            """
            UPDATE answers SET text = :text, radio = :radio, checkbox = :checkbox
            WHERE id = :aid AND record_id = :rid AND question_id = :qid
            """
        ),
        {
            "text": text,
            "radio": radio,
            "checkbox": dump_checkbox(checkbox),
            "aid": answer_id,
            "rid": record_id,
            "qid": question_id,
        },
    )
    return int(result.rowcount or 0)


def count_incomplete(conn: Connection, record_id: int) -> int:
    """Count TEXT answers without text and RADIO answers without a choice.

    CHECKBOX questions are not part of the completeness rule.
    """
    row = conn.execute(
        sql_text(
            """
            SELECT COUNT(*)
            FROM answers a
            JOIN questions q ON q.id = a.question_id
            WHERE a.record_id = :rid
              AND ((q.type = :text_type AND a.text IS NULL)
                   OR (q.type = :radio_type AND a.radio IS NULL))
            """
        ),
        {"rid": record_id, "text_type": "TEXT", "radio_type": "RADIO"},
    ).fetchone()
    return int(row[0]) if row and row[0] is not None else 0


__all__ = [
    "seed_blank_answers",
    "list_answers",
    "get_answer",
    "update_answer",
    "count_incomplete",
]
