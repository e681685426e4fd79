"""User lookups needed by the authentication boundary and access grants."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from survey_api.logic.serialization import row_to_dict


def get_user(conn: Connection, user_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        sql_text("SELECT id, first_name, last_name, email, role FROM users WHERE id = :uid"),
        {"uid": user_id},
    ).mappings().fetchone()
    return row_to_dict(row) if row else None


__all__ = ["get_user"]
