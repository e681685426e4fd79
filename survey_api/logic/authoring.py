"""Survey structure authoring: questions, option links and the options catalogue.

All structural writes go through the lifecycle mutation guard and through the
ordering engine, which keeps active question indices (per survey) and active
link indices (per question) contiguous from 1. Each public function runs in
exactly one transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection

from survey_api.db.base import read_only, transaction
from survey_api.logic import ordering, repository_options, repository_questions
from survey_api.logic.errors import Conflict, NotFound, ValidationError, translate_storage_errors
from survey_api.logic.order_sequences import OptionLinkSiblings, QuestionSiblings
from survey_api.logic.permissions import require_admin
from survey_api.logic.survey_lifecycle import load_mutable_survey, load_survey
from survey_api.models.kinds import OptionType, QuestionType
from survey_api.models.principal import Principal

logger = logging.getLogger(__name__)

_QUESTION_DEFAULTS = {"note": None, "mandatory": True, "type": QuestionType.TEXT, "attachments": False}


def _require_text(value: Optional[str]) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError("Some values are missing", code="FIELDS_MISSING")
    return cleaned


def _validate_type(value: Optional[str]) -> str:
    resolved = str(value).strip().upper()
    if resolved not in QuestionType.ALL:
        raise ValidationError(
            f"Invalid question type {value!r}; expected one of {list(QuestionType.ALL)}",
            code="QUESTION_TYPE_INVALID",
        )
    return resolved


def _load_question(conn: Connection, survey_id: int, question_id: int) -> Dict[str, Any]:
    question = repository_questions.get_question(conn, survey_id, question_id)
    if question is None:
        raise NotFound("Question not found", code="QUESTION_NOT_FOUND")
    return question


def _active_link_id(conn: Connection, question_id: int, option_id: int) -> int:
    link = repository_options.get_link(conn, question_id, option_id)
    if link is None or link["is_deleted"]:
        raise NotFound("Option is not attached to this question", code="LINK_NOT_FOUND")
    return int(link["id"])


def _attach_options(conn: Connection, questions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Assemble questions with their ordered options from one flat link query."""
    by_question: Dict[int, List[Dict[str, Any]]] = {int(q["id"]): [] for q in questions}
    for link in repository_options.list_links_with_options(conn, by_question.keys()):
        by_question[int(link["question_id"])].append(
            {
                "id": link["option_id"],
                "link_id": link["link_id"],
                "index": link["index"],
                "value": link["value"],
                "description": link["description"],
                "type": link["type"],
                "survey_id": link["survey_id"],
            }
        )
    return [{**q, "options": by_question[int(q["id"])]} for q in questions]


# Reads


def get_survey_detail(survey_id: int, principal: Principal) -> Dict[str, Any]:
    """Survey with its active questions in index order, each with ordered options.

    Deleted surveys are only visible to admins.
    """
    with translate_storage_errors("get_survey"), read_only() as conn:
        survey = load_survey(conn, survey_id)
        if survey["is_deleted"] and not principal.is_admin:
            raise NotFound("Survey not found", code="SURVEY_NOT_FOUND")
        questions = repository_questions.list_active_questions(conn, survey_id)
        return {**survey, "questions": _attach_options(conn, questions)}


def list_questions(survey_id: int, principal: Principal) -> List[Dict[str, Any]]:
    with translate_storage_errors("list_questions"), read_only() as conn:
        survey = load_survey(conn, survey_id)
        if survey["is_deleted"] and not principal.is_admin:
            raise NotFound("Survey not found", code="SURVEY_NOT_FOUND")
        return _attach_options(conn, repository_questions.list_active_questions(conn, survey_id))


def get_question(survey_id: int, question_id: int, principal: Principal) -> Dict[str, Any]:
    with translate_storage_errors("get_question"), read_only() as conn:
        survey = load_survey(conn, survey_id)
        if survey["is_deleted"] and not principal.is_admin:
            raise NotFound("Survey not found", code="SURVEY_NOT_FOUND")
        question = _load_question(conn, survey_id, question_id)
        return _attach_options(conn, [question])[0]


# Questions


def create_question(survey_id: int, principal: Principal, fields: Dict[str, Any]) -> Dict[str, Any]:
    require_admin(principal)
    description = _require_text(fields.get("description"))
    values = {**_QUESTION_DEFAULTS, **{k: v for k, v in fields.items() if v is not None}}
    qtype = _validate_type(values["type"])

    with translate_storage_errors("create_question"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        index = ordering.insert_at_end(QuestionSiblings(conn), survey_id)
        question_id = repository_questions.insert_question(
            conn,
            survey_id=survey_id,
            description=description,
            note=values["note"],
            mandatory=bool(values["mandatory"]),
            type=qtype,
            attachments=bool(values["attachments"]),
            index=index,
        )
        created = _load_question(conn, survey_id, question_id)
    logger.info("question_created survey_id=%s question_id=%s index=%s", survey_id, question_id, index)
    return {**created, "options": []}


def update_question(survey_id: int, question_id: int, principal: Principal, fields: Dict[str, Any]) -> Dict[str, Any]:
    require_admin(principal)
    changes = {k: v for k, v in fields.items() if v is not None}
    if "description" in changes:
        changes["description"] = _require_text(changes["description"])
    if "type" in changes:
        changes["type"] = _validate_type(changes["type"])

    with translate_storage_errors("update_question"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        _load_question(conn, survey_id, question_id)
        repository_questions.update_question(conn, question_id, changes)
        updated = _load_question(conn, survey_id, question_id)
        return _attach_options(conn, [updated])[0]


def delete_question(survey_id: int, question_id: int, principal: Principal) -> int:
    """Soft-delete a question (and its links) and compact the survey's indices."""
    require_admin(principal)
    with translate_storage_errors("delete_question"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        prior = ordering.delete_and_compact(QuestionSiblings(conn), survey_id, question_id)
        repository_questions.delete_links_of_question(conn, question_id)
    logger.info("question_deleted survey_id=%s question_id=%s prior_index=%s", survey_id, question_id, prior)
    return prior


def reorder_question(survey_id: int, question_id: int, principal: Principal, direction: Optional[str]) -> List[Dict[str, Any]]:
    """Swap a question with its neighbour; return the survey's questions in new order."""
    require_admin(principal)
    with translate_storage_errors("reorder_question"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        ordering.swap(QuestionSiblings(conn), survey_id, question_id, direction)
        return repository_questions.list_active_questions(conn, survey_id)


# Option links


def attach_option(survey_id: int, question_id: int, principal: Principal, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Link an existing option, or a new CUSTOM option, to the end of a question.

    An existing option must be SYSTEM or a CUSTOM option of this survey. A
    previously detached link is revived rather than duplicated.
    """
    require_admin(principal)
    option_id = fields.get("option_id")
    if option_id is None:
        value = _require_text(fields.get("value"))
        description = _require_text(fields.get("description"))

    with translate_storage_errors("attach_option"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        _load_question(conn, survey_id, question_id)

        if option_id is None:
            option_id = repository_options.insert_option(
                conn,
                value=value,
                description=description,
                type=OptionType.CUSTOM,
                survey_id=survey_id,
            )
        else:
            option = repository_options.get_option(conn, int(option_id))
            if option is None:
                raise NotFound("Option not found", code="OPTION_NOT_FOUND")
            if option["type"] == OptionType.CUSTOM and option["survey_id"] != survey_id:
                raise Conflict("Custom option belongs to another survey", code="OPTION_NOT_LINKABLE")

        store = OptionLinkSiblings(conn)
        existing = repository_options.get_link(conn, question_id, int(option_id))
        if existing is not None and not existing["is_deleted"]:
            raise Conflict("Option already attached to this question", code="DUPLICATE_ENTRY")
        index = ordering.insert_at_end(store, question_id)
        if existing is not None:
            repository_options.revive_link(conn, int(existing["id"]), index)
            link_id = int(existing["id"])
        else:
            link_id = repository_options.insert_link(conn, question_id=question_id, option_id=int(option_id), index=index)
        attached = repository_options.get_option(conn, int(option_id))

    logger.info(
        "option_attached survey_id=%s question_id=%s option_id=%s index=%s",
        survey_id,
        question_id,
        option_id,
        index,
    )
    return {**(attached or {}), "link_id": link_id, "index": index}


def detach_option(survey_id: int, question_id: int, option_id: int, principal: Principal) -> int:
    require_admin(principal)
    with translate_storage_errors("detach_option"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        _load_question(conn, survey_id, question_id)
        link_id = _active_link_id(conn, question_id, option_id)
        prior = ordering.delete_and_compact(OptionLinkSiblings(conn), question_id, link_id)
    logger.info("option_detached question_id=%s option_id=%s prior_index=%s", question_id, option_id, prior)
    return prior


def reorder_option(
    survey_id: int,
    question_id: int,
    option_id: int,
    principal: Principal,
    direction: Optional[str],
) -> List[Dict[str, Any]]:
    """Swap an option link with its neighbour; return the question's options in new order."""
    require_admin(principal)
    with translate_storage_errors("reorder_option"), transaction() as conn:
        load_mutable_survey(conn, survey_id)
        question = _load_question(conn, survey_id, question_id)
        link_id = _active_link_id(conn, question_id, option_id)
        ordering.swap(OptionLinkSiblings(conn), question_id, link_id, direction)
        return _attach_options(conn, [question])[0]["options"]


# Options catalogue


def create_system_option(principal: Principal, value: Optional[str], description: Optional[str]) -> Dict[str, Any]:
    require_admin(principal)
    clean_value = _require_text(value)
    clean_description = _require_text(description)
    with translate_storage_errors("create_system_option"), transaction() as conn:
        option_id = repository_options.insert_option(
            conn,
            value=clean_value,
            description=clean_description,
            type=OptionType.SYSTEM,
            survey_id=None,
        )
        return repository_options.get_option(conn, option_id) or {}


def search_system_options(needle: Optional[str]) -> List[Dict[str, Any]]:
    with translate_storage_errors("search_system_options"), read_only() as conn:
        return repository_options.search_system_options(conn, (needle or "").strip())


__all__ = [
    "get_survey_detail",
    "list_questions",
    "get_question",
    "create_question",
    "update_question",
    "delete_question",
    "reorder_question",
    "attach_option",
    "detach_option",
    "reorder_option",
    "create_system_option",
    "search_system_options",
]
