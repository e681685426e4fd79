"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from a migrations directory (`migrations/`
for PostgreSQL, `sqlite_migrations/` for SQLite). Rollback files are skipped
and applied filenames are recorded in a file-backed journal
(`<dir>/_journal.json`) so a migration is never reapplied.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    pysqlite refuses several statements in one execute() call, so SQLite goes
    through the DB-API `executescript`. Other dialects receive the script as-is.
    """
    name = (conn.dialect.name or "").lower()
    if name == "sqlite":
        raw = conn.connection.driver_connection
        raw.executescript(sql)
        return
    conn.exec_driver_sql(sql)


def _load_journal(journal_path: Path) -> list[dict]:
    if not journal_path.exists():
        return []
    try:
        data = json.loads(journal_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.error("migration_journal_parse_failed path=%s", journal_path, exc_info=True)
        return []
    if not isinstance(data, list):
        return []
    return [e for e in data if isinstance(e, dict)]


def apply_migrations(
    engine: Engine,
    migrations_dir: str | os.PathLike[str] = "migrations",
    *,
    journal_path: str | os.PathLike[str] | None = None,
) -> list[str]:
    """Apply pending migrations and return the filenames applied in this run.

    The journal lives beside the scripts unless `journal_path` points elsewhere,
    which lets throwaway databases keep their own history.
    """
    root = Path(migrations_dir)
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", root)
        return []

    journal_path = Path(journal_path) if journal_path else root / "_journal.json"
    journal_entries = _load_journal(journal_path)
    applied = {Path(str(e.get("filename", ""))).name for e in journal_entries}
    newly_applied: list[str] = []

    with engine.begin() as conn:
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            logger.info("migration_applied file=%s", fname)

            journal_entries.append({
                "filename": f"{root.name}/{fname}",
                # ISO-8601 UTC without fractional seconds
                "applied_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            })
            _atomic_write_json(journal_path, journal_entries)
            newly_applied.append(fname)
    return newly_applied


def _atomic_write_json(path: Path, content: list[dict]) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(content, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp_path, path)
