"""Database bootstrap utilities for the Survey Service.

Exposes engine construction, transaction helpers and the SQL migrations
runner. The DB layer does not leak ORM models into route handlers.
"""

from survey_api.db.base import get_engine, read_only, transaction
from survey_api.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "transaction",
    "read_only",
    "apply_migrations",
]
