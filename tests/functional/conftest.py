from __future__ import annotations

"""Functional test bootstrap.

Functional tests run against a file-backed SQLite database shared by every
connection in the process. The SQLite migrations are applied once at session
start, with a journal kept under ``tmp/`` so the checked-in migrations
directory is never written to. Rows are wiped after each test.
"""

import os
import pathlib
from typing import Iterator

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_TMP = _ROOT / "tmp"
_DB_FILE = _TMP / "functional_tests.db"
_JOURNAL = _TMP / "functional_tests_journal.json"
_TMP.mkdir(parents=True, exist_ok=True)
for _stale in (_DB_FILE, _JOURNAL):
    if _stale.exists():
        _stale.unlink()

# Point the engine at the file DB before any survey_api module builds one
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
os.environ["SECRET"] = "functional-test-secret"
# Disable app startup auto-migrations; we apply SQLite migrations explicitly
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"
# Keep published domain events in memory so tests can assert on them
os.environ["BUFFER_DOMAIN_EVENTS"] = "1"

_TABLES_CHILD_FIRST = (
    "answers",
    "records",
    "accesses",
    "question_option",
    "options",
    "questions",
    "surveys",
    "users",
)


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap() -> Iterator[None]:
    """Session-level bootstrap: apply migrations once for the shared DB."""
    from survey_api.db.base import get_engine
    from survey_api.db.migrations_runner import apply_migrations

    engine = get_engine(os.environ["TEST_DATABASE_URL"])
    apply_migrations(engine, migrations_dir=_ROOT / "sqlite_migrations", journal_path=_JOURNAL)
    yield


@pytest.fixture(autouse=True)
def clean_tables(monkeypatch) -> Iterator[None]:
    from sqlalchemy import text

    from survey_api.db.base import transaction
    from survey_api.logic import events

    for key in ("GRANT_ON_LOCK", "SEAL_SUBMITTED_RECORDS"):
        monkeypatch.delenv(key, raising=False)
    events.get_buffered_events(clear=True)
    yield
    with transaction() as conn:
        for table in _TABLES_CHILD_FIRST:
            conn.execute(text(f"DELETE FROM {table}"))


def _insert_user(first_name: str, role: str) -> int:
    from sqlalchemy import text

    from survey_api.db.base import transaction

    with transaction() as conn:
        return int(
            conn.execute(
                text(
                    "INSERT INTO users (first_name, last_name, email, role) "
                    "VALUES (:first, :last, :email, :role) RETURNING id"
                ),
                {"first": first_name, "last": "Tester", "email": f"{first_name.lower()}@example.org", "role": role},
            ).scalar_one()
        )


@pytest.fixture
def admin():
    from survey_api.models.principal import ROLE_ADMIN, Principal

    return Principal(id=_insert_user("Ada", ROLE_ADMIN), role=ROLE_ADMIN)


@pytest.fixture
def collector_user():
    from survey_api.models.principal import ROLE_USER, Principal

    return Principal(id=_insert_user("Cole", ROLE_USER), role=ROLE_USER)


@pytest.fixture
def other_user():
    from survey_api.models.principal import ROLE_USER, Principal

    return Principal(id=_insert_user("Otto", ROLE_USER), role=ROLE_USER)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from survey_api.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Build `x-access-token` headers for a principal."""
    from survey_api.http.principal import issue_token

    def _headers(principal) -> dict[str, str]:
        return {"x-access-token": issue_token(principal.id, principal.role)}

    return _headers
