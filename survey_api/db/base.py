"""SQLAlchemy engine and connection lifecycle.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; repositories issue
SQL through `sqlalchemy.text` against connections handed to them by the
service layer, which owns transaction boundaries.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url
    # Imported lazily so that config loading never runs at import time
    from survey_api.config import load_config

    return load_config().database.dsn


# Module-level cached Engine so all repositories share one pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across requests and threads; otherwise every connection would see an
    empty database.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite") and ":memory:" in resolved_url:
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(resolved_url, **kwargs)
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created dialect=%s", _ENGINE.dialect.name)

    return _ENGINE


@contextmanager
def transaction() -> Generator[Connection, None, None]:
    """Yield a connection inside one transaction; commit on exit, roll back on error."""
    eng = get_engine()
    with eng.connect() as conn:
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except SQLAlchemyError:
            trans.rollback()
            logger.error("DB transaction error; rolled back", exc_info=True)
            raise
        except Exception:
            # Precondition failures abort the transaction without being DB faults
            trans.rollback()
            raise


@contextmanager
def read_only() -> Generator[Connection, None, None]:
    """Yield a connection for reads; nothing is committed."""
    eng = get_engine()
    with eng.connect() as conn:
        yield conn
