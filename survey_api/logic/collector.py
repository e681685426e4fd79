"""Record and answer collection against locked surveys.

A record is opened by a user holding an active grant on a LOCKED survey and
is seeded with one blank answer per active question. Its creator fills the
answers and submits; submission requires every TEXT answer to carry text and
every RADIO answer to carry a choice. CHECKBOX answers are not part of the
completeness rule.

Lock state is re-checked on every write and the access grant on every read
because a grant may have been revoked, or the survey deleted, since the
record was opened.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection

from survey_api.db.base import read_only, transaction
from survey_api.logic import events, repository_answers, repository_options, repository_questions, repository_records
from survey_api.logic.errors import Conflict, Forbidden, NotFound, ValidationError, translate_storage_errors
from survey_api.logic.permissions import require_grant
from survey_api.logic.survey_lifecycle import load_survey
from survey_api.models.kinds import SurveyStatus
from survey_api.models.principal import Principal

logger = logging.getLogger(__name__)


def _ensure_collectable(conn: Connection, survey_id: int, principal: Principal) -> Dict[str, Any]:
    survey = load_survey(conn, survey_id)
    if survey["is_deleted"]:
        raise Conflict("Survey deleted", code="SURVEY_DELETED")
    if survey["status"] != SurveyStatus.LOCKED:
        raise Conflict("Survey must be locked before collecting records", code="SURVEY_NOT_LOCKED")
    require_grant(conn, survey_id, principal)
    return survey


def _load_record(conn: Connection, record_id: int) -> Dict[str, Any]:
    record = repository_records.get_record(conn, record_id)
    if record is None:
        raise NotFound("Record not found", code="RECORD_NOT_FOUND")
    return record


def _ensure_owner(record: Dict[str, Any], principal: Principal, *, allow_admin: bool = False) -> None:
    if record["created_by"] == principal.id:
        return
    if allow_admin and principal.is_admin:
        return
    raise Forbidden("Record belongs to another user", code="RECORD_NOT_OWNED")


def _ensure_readable(conn: Connection, record: Dict[str, Any], principal: Principal) -> None:
    _ensure_owner(record, principal, allow_admin=True)
    if not principal.is_admin:
        require_grant(conn, record["survey_id"], principal)


def _ensure_open(record: Dict[str, Any], seal_submitted: bool) -> None:
    if seal_submitted and record["submitted_at"] is not None:
        raise Conflict("Record already submitted", code="RECORD_ALREADY_SUBMITTED")


def _require_text(value: Optional[str]) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError("Some values are missing", code="FIELDS_MISSING")
    return cleaned


# Records


def create_record(
    survey_id: int,
    principal: Principal,
    subject_name: Optional[str],
    subject_description: Optional[str],
) -> Dict[str, Any]:
    """Open a record and seed one blank answer per active question."""
    with translate_storage_errors("create_record"), transaction() as conn:
        _ensure_collectable(conn, survey_id, principal)
        name = _require_text(subject_name)
        description = _require_text(subject_description)
        record_id = repository_records.insert_record(
            conn,
            survey_id=survey_id,
            created_by=principal.id,
            subject_name=name,
            subject_description=description,
        )
        question_ids = [q["id"] for q in repository_questions.list_active_questions(conn, survey_id)]
        seeded = repository_answers.seed_blank_answers(conn, record_id, question_ids)
        record = _load_record(conn, record_id)
        answers = repository_answers.list_answers(conn, record_id)
    logger.info("record_created record_id=%s survey_id=%s answers=%s", record_id, survey_id, seeded)
    events.publish(events.RECORD_CREATED, {"record_id": record_id, "survey_id": survey_id})
    return {**record, "answers": answers}


def list_records(survey_id: int, principal: Principal) -> List[Dict[str, Any]]:
    """Admins see every record of the survey; other users see their own."""
    with translate_storage_errors("list_records"), read_only() as conn:
        load_survey(conn, survey_id)
        if principal.is_admin:
            return repository_records.list_records(conn, survey_id)
        require_grant(conn, survey_id, principal)
        return repository_records.list_records(conn, survey_id, created_by=principal.id)


def get_record(record_id: int, principal: Principal) -> Dict[str, Any]:
    with translate_storage_errors("get_record"), read_only() as conn:
        record = _load_record(conn, record_id)
        _ensure_readable(conn, record, principal)
        return {**record, "answers": repository_answers.list_answers(conn, record_id)}


def delete_record(record_id: int, principal: Principal) -> None:
    with translate_storage_errors("delete_record"), transaction() as conn:
        record = _load_record(conn, record_id)
        _ensure_owner(record, principal, allow_admin=True)
        repository_records.mark_deleted(conn, record_id)
    logger.info("record_deleted record_id=%s by=%s", record_id, principal.id)
    events.publish(events.RECORD_DELETED, {"record_id": record_id, "survey_id": record["survey_id"]})


# Answers


def list_answers(record_id: int, principal: Principal) -> List[Dict[str, Any]]:
    with translate_storage_errors("list_answers"), read_only() as conn:
        record = _load_record(conn, record_id)
        _ensure_readable(conn, record, principal)
        return repository_answers.list_answers(conn, record_id)


def update_answer(
    record_id: int,
    answer_id: int,
    principal: Principal,
    fields: Dict[str, Any],
    *,
    question_id: Optional[int] = None,
    seal_submitted: bool = False,
) -> Dict[str, Any]:
    """Overwrite one answer of the principal's own record.

    ``question_id`` is optional; when given it must be the answer's question.
    Radio and checkbox values must reference options linked to that question.
    """
    text = fields.get("text")
    radio = fields.get("radio")
    checkbox = fields.get("checkbox")

    with translate_storage_errors("update_answer"), transaction() as conn:
        record = _load_record(conn, record_id)
        _ensure_collectable(conn, record["survey_id"], principal)
        _ensure_owner(record, principal)
        _ensure_open(record, seal_submitted)

        answer = repository_answers.get_answer(conn, record_id, answer_id)
        if answer is None or (question_id is not None and int(question_id) != answer["question_id"]):
            raise NotFound("Answer not found", code="ANSWER_NOT_FOUND")

        chosen = ([radio] if radio is not None else []) + list(checkbox or [])
        if chosen:
            linked = set(repository_options.linked_option_ids(conn, answer["question_id"]))
            unknown = sorted({int(c) for c in chosen} - linked)
            if unknown:
                raise ValidationError(
                    f"Options {unknown} are not linked to this question",
                    code="ANSWER_OPTION_INVALID",
                )

        repository_answers.update_answer(
            conn,
            record_id=record_id,
            question_id=answer["question_id"],
            answer_id=answer_id,
            text=text,
            radio=radio,
            checkbox=checkbox,
        )
        return repository_answers.get_answer(conn, record_id, answer_id) or {}


def submit(record_id: int, principal: Principal, *, seal_submitted: bool = False) -> Dict[str, Any]:
    """Stamp submission time once every TEXT and RADIO answer is filled in."""
    with translate_storage_errors("submit_record"), transaction() as conn:
        record = _load_record(conn, record_id)
        _ensure_collectable(conn, record["survey_id"], principal)
        _ensure_owner(record, principal)
        _ensure_open(record, seal_submitted)
        missing = repository_answers.count_incomplete(conn, record_id)
        if missing:
            raise ValidationError(f"{missing} answer(s) still missing", code="ANSWERS_INCOMPLETE")
        repository_records.mark_submitted(conn, record_id)
        submitted = _load_record(conn, record_id)
    logger.info("record_submitted record_id=%s survey_id=%s", record_id, record["survey_id"])
    events.publish(events.RECORD_SUBMITTED, {"record_id": record_id, "survey_id": record["survey_id"]})
    return submitted


__all__ = [
    "create_record",
    "list_records",
    "get_record",
    "delete_record",
    "list_answers",
    "update_answer",
    "submit",
]
