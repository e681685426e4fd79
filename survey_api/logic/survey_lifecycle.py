"""Survey lifecycle state machine.

A survey is created UNLOCKED, may be edited while UNLOCKED and not deleted,
and is frozen by locking (one-way). Soft deletion is orthogonal to status,
irreversible, and cascades to the survey's active questions, their option
links and its CUSTOM options inside one transaction.

Every operation checks its preconditions explicitly, inside the transaction
that performs the mutation, before writing anything.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection

from survey_api.db.base import read_only, transaction
from survey_api.logic import events, repository_access, repository_surveys
from survey_api.logic.errors import Conflict, NotFound, ValidationError, translate_storage_errors
from survey_api.logic.permissions import require_admin
from survey_api.models.kinds import SurveyStatus
from survey_api.models.principal import Principal

logger = logging.getLogger(__name__)


def load_survey(conn: Connection, survey_id: int) -> Dict[str, Any]:
    survey = repository_surveys.get_survey(conn, survey_id)
    if survey is None:
        raise NotFound("Survey not found", code="SURVEY_NOT_FOUND")
    return survey


def ensure_mutable(survey: Dict[str, Any]) -> None:
    """Reject structural edits on locked or deleted surveys."""
    if survey["status"] == SurveyStatus.LOCKED:
        raise Conflict("Locked survey cannot be modified", code="SURVEY_LOCKED")
    if survey["is_deleted"]:
        raise Conflict("Survey deleted", code="SURVEY_DELETED")


def load_mutable_survey(conn: Connection, survey_id: int) -> Dict[str, Any]:
    survey = load_survey(conn, survey_id)
    ensure_mutable(survey)
    return survey


def create_survey(principal: Principal, name: Optional[str], description: Optional[str]) -> Dict[str, Any]:
    require_admin(principal)
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValidationError("Some values are missing", code="FIELDS_MISSING")

    with translate_storage_errors("create_survey"), transaction() as conn:
        if repository_surveys.name_in_use(conn, clean_name):
            raise Conflict("Survey name exists", code="SURVEY_NAME_EXISTS")
        survey_id = repository_surveys.insert_survey(
            conn,
            name=clean_name,
            description=description,
            version=1,
            created_by=principal.id,
        )
        survey = load_survey(conn, survey_id)
    events.publish(events.SURVEY_CREATED, {"survey_id": survey_id, "name": clean_name})
    return survey


def list_surveys(principal: Principal, *, include_deleted: bool = False) -> List[Dict[str, Any]]:
    require_admin(principal)
    with translate_storage_errors("list_surveys"), read_only() as conn:
        return repository_surveys.list_surveys(conn, include_deleted=include_deleted)


def update_description(survey_id: int, principal: Principal, description: Optional[str]) -> Dict[str, Any]:
    require_admin(principal)
    if description is None:
        raise ValidationError("Some values are missing", code="FIELDS_MISSING")
    with translate_storage_errors("update_survey"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        repository_surveys.update_description(conn, survey_id, description)
        return load_survey(conn, survey_id)


def lock_survey(survey_id: int, principal: Principal, *, grant_on_lock: bool = False) -> Dict[str, Any]:
    """Freeze a survey's structure.

    With ``grant_on_lock`` the locking admin also receives an access grant in
    the same transaction.
    """
    require_admin(principal)
    with translate_storage_errors("lock_survey"), transaction() as conn:
        survey = load_survey(conn, survey_id)
        if survey["status"] == SurveyStatus.LOCKED:
            raise Conflict("Survey already locked", code="SURVEY_ALREADY_LOCKED")
        if survey["is_deleted"]:
            raise Conflict("Survey deleted", code="SURVEY_DELETED")
        repository_surveys.mark_locked(conn, survey_id)
        if grant_on_lock:
            repository_access.grant(conn, survey_id, principal.id)
        locked = load_survey(conn, survey_id)
    logger.info("survey_locked survey_id=%s by=%s grant_on_lock=%s", survey_id, principal.id, grant_on_lock)
    events.publish(events.SURVEY_LOCKED, {"survey_id": survey_id})
    return locked


def delete_survey(survey_id: int, principal: Principal) -> Dict[str, int]:
    """Soft-delete a survey from any status; deleting twice is a no-op."""
    require_admin(principal)
    with translate_storage_errors("delete_survey"), transaction() as conn:
        survey = load_survey(conn, survey_id)
        if survey["is_deleted"]:
            return {"questions": 0, "links": 0, "options": 0}
        flagged = repository_surveys.mark_deleted(conn, survey_id)
    logger.info("survey_deleted survey_id=%s cascade=%s", survey_id, flagged)
    events.publish(events.SURVEY_DELETED, {"survey_id": survey_id, **flagged})
    return flagged


__all__ = [
    "load_survey",
    "ensure_mutable",
    "load_mutable_survey",
    "create_survey",
    "list_surveys",
    "update_description",
    "lock_survey",
    "delete_survey",
]
