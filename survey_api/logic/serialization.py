"""Row normalisation shared by repositories.

SQLite hands back booleans as integers and timestamps as strings while
PostgreSQL returns native types; callers get one shape from both.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

_BOOLEAN_COLUMNS = {"is_deleted", "mandatory", "attachments", "is_active"}
_TIMESTAMP_COLUMNS = {"created_at", "locked_at", "submitted_at", "last_login"}


def format_timestamp(value: Any) -> str | None:
    """Format a timestamp as RFC3339 UTC with trailing 'Z'."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    # SQLite CURRENT_TIMESTAMP text: 'YYYY-MM-DD HH:MM:SS' in UTC
    text = str(value)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return text
    return format_timestamp(parsed)


def dump_checkbox(values: List[int] | None) -> str:
    return json.dumps([int(v) for v in (values or [])])


def load_checkbox(raw: Any) -> List[int]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return [int(v) for v in raw]
    decoded = json.loads(raw)
    return [int(v) for v in decoded] if isinstance(decoded, list) else []


def row_to_dict(row: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in row.items():
        if key in _BOOLEAN_COLUMNS and value is not None:
            out[key] = bool(value)
        elif key in _TIMESTAMP_COLUMNS:
            out[key] = format_timestamp(value)
        elif key == "checkbox":
            out[key] = load_checkbox(value)
        else:
            out[key] = value
    return out


__all__ = ["format_timestamp", "dump_checkbox", "load_checkbox", "row_to_dict"]
