"""SQL-backed sibling stores for the ordering engine.

Each store is bound to a connection that already has a transaction open, so
the reads and writes the engine issues through it land in the caller's
transaction. Soft-deleted rows are invisible to every query here.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection


class _SqlSiblings:
    table = ""
    container_column = ""
    missing_code = ""

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def max_index(self, container_id: int) -> int:
        row = self.conn.execute(
            sql_text(
                f'SELECT COALESCE(MAX("index"), 0) FROM {self.table} '
                f"WHERE {self.container_column} = :cid AND is_deleted = :deleted"
            ),
            {"cid": container_id, "deleted": False},
        ).fetchone()
        return int(row[0]) if row and row[0] is not None else 0

    def index_of(self, container_id: int, item_id: int) -> Optional[int]:
        row = self.conn.execute(
            sql_text(
                f'SELECT "index" FROM {self.table} '
                f"WHERE id = :iid AND {self.container_column} = :cid AND is_deleted = :deleted"
            ),
            {"iid": item_id, "cid": container_id, "deleted": False},
        ).fetchone()
        return int(row[0]) if row else None

    def item_at(self, container_id: int, index: int) -> Optional[int]:
        row = self.conn.execute(
            sql_text(
                f"SELECT id FROM {self.table} "
                f'WHERE {self.container_column} = :cid AND "index" = :idx AND is_deleted = :deleted '
                "ORDER BY id ASC LIMIT 1"
            ),
            {"cid": container_id, "idx": index, "deleted": False},
        ).fetchone()
        return int(row[0]) if row else None

    def set_index(self, item_id: int, index: int) -> None:
        self.conn.execute(
            sql_text(f'UPDATE {self.table} SET "index" = :idx WHERE id = :iid'),
            {"idx": index, "iid": item_id},
        )

    def remove(self, item_id: int) -> None:
        self.conn.execute(
            sql_text(f"UPDATE {self.table} SET is_deleted = :deleted WHERE id = :iid"),
            {"deleted": True, "iid": item_id},
        )

    def shift_after(self, container_id: int, index: int) -> int:
        result = self.conn.execute(
            sql_text(
                f'UPDATE {self.table} SET "index" = "index" - 1 '
                f'WHERE {self.container_column} = :cid AND "index" > :idx AND is_deleted = :deleted'
            ),
            {"cid": container_id, "idx": index, "deleted": False},
        )
        return int(result.rowcount or 0)


class QuestionSiblings(_SqlSiblings):
    """Questions ordered within a survey."""

    table = "questions"
    container_column = "survey_id"
    missing_code = "QUESTION_NOT_FOUND"


class OptionLinkSiblings(_SqlSiblings):
    """Option links ordered within a question."""

    table = "question_option"
    container_column = "question_id"
    missing_code = "LINK_NOT_FOUND"


__all__ = ["QuestionSiblings", "OptionLinkSiblings"]
