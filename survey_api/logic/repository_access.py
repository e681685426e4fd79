"""Access control ledger: per-(survey, user) grants.

A grant row is never deleted; revocation clears ``is_active`` so history
survives, and granting again reactivates the same row.
"""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from survey_api.logic.serialization import row_to_dict


def is_active(conn: Connection, survey_id: int, user_id: int) -> bool:
    row = conn.execute(
        sql_text(
            "SELECT 1 FROM accesses WHERE survey_id = :sid AND user_id = :uid AND is_active = :active"
        ),
        {"sid": survey_id, "uid": user_id, "active": True},
    ).fetchone()
    return row is not None


def grant(conn: Connection, survey_id: int, user_id: int) -> int:
    """Create or reactivate the grant; return its id."""
    row = conn.execute(
        sql_text("SELECT id FROM accesses WHERE survey_id = :sid AND user_id = :uid"),
        {"sid": survey_id, "uid": user_id},
    ).fetchone()
    if row is not None:
        conn.execute(
            sql_text("UPDATE accesses SET is_active = :active WHERE id = :aid"),
            {"active": True, "aid": row[0]},
        )
        return int(row[0])
    new_id = conn.execute(
        sql_text(
            "INSERT INTO accesses (survey_id, user_id, is_active) VALUES (:sid, :uid, :active) RETURNING id"
        ),
        {"sid": survey_id, "uid": user_id, "active": True},
    ).scalar_one()
    return int(new_id)


def revoke(conn: Connection, survey_id: int, user_id: int) -> bool:
    """Deactivate the grant; return False when no grant row exists."""
    result = conn.execute(
        sql_text("UPDATE accesses SET is_active = :inactive WHERE survey_id = :sid AND user_id = :uid"),
        {"inactive": False, "sid": survey_id, "uid": user_id},
    )
    return bool(result.rowcount)


def list_grants(conn: Connection, survey_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        sql_text(
            "SELECT id, survey_id, user_id, is_active FROM accesses WHERE survey_id = :sid ORDER BY id ASC"
        ),
        {"sid": survey_id},
    ).mappings().all()
    return [row_to_dict(r) for r in rows]


__all__ = ["is_active", "grant", "revoke", "list_grants"]
