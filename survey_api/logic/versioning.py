"""Version cloning: derive a new UNLOCKED draft from a locked survey.

The clone copies the source's active questions, its active CUSTOM options and
every active link between them, remapping ids as it goes. SYSTEM options are
shared catalogue entries and are referenced by their original id. Everything
happens in one transaction; a failure at any step leaves no partial survey.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from survey_api.db.base import transaction
from survey_api.logic import events, repository_options, repository_questions, repository_surveys
from survey_api.logic.errors import Conflict, translate_storage_errors
from survey_api.logic.permissions import require_admin
from survey_api.logic.survey_lifecycle import load_survey
from survey_api.models.kinds import OptionType, SurveyStatus
from survey_api.models.principal import Principal

logger = logging.getLogger(__name__)


def default_description(version: int, source_description: Optional[str]) -> str:
    return f"Version {version}: {source_description or ''}"


def resolve_description(requested: Optional[str], version: int, source_description: Optional[str]) -> str:
    """Use the trimmed requested description when given, else the synthesized one."""
    fallback = default_description(version, source_description)
    cleaned = (requested or "").strip()
    if cleaned and cleaned != fallback:
        return cleaned
    return fallback


def clone_as_new_version(
    survey_id: int,
    principal: Principal,
    requested_description: Optional[str] = None,
) -> int:
    """Clone a LOCKED survey into version max+1 of the same name; return the new id."""
    require_admin(principal)
    with translate_storage_errors("clone_survey"), transaction() as conn:
        source = load_survey(conn, survey_id)
        if source["status"] != SurveyStatus.LOCKED:
            raise Conflict("Only locked surveys can be versioned", code="SURVEY_NOT_LOCKED")

        version = repository_surveys.max_version(conn, source["name"]) + 1
        new_survey_id = repository_surveys.insert_survey(
            conn,
            name=source["name"],
            description=resolve_description(requested_description, version, source["description"]),
            version=version,
            created_by=principal.id,
        )

        question_map: Dict[int, int] = {}
        for question in repository_questions.list_active_questions(conn, survey_id):
            question_map[int(question["id"])] = repository_questions.insert_question(
                conn,
                survey_id=new_survey_id,
                description=question["description"],
                note=question["note"],
                mandatory=bool(question["mandatory"]),
                type=question["type"],
                attachments=bool(question["attachments"]),
                index=int(question["index"]),
            )

        option_map: Dict[int, int] = {}
        for option in repository_options.list_active_custom_options(conn, survey_id):
            option_map[int(option["id"])] = repository_options.insert_option(
                conn,
                value=option["value"],
                description=option["description"],
                type=OptionType.CUSTOM,
                survey_id=new_survey_id,
            )

        links = repository_options.list_links_with_options(conn, question_map.keys())
        for link in links:
            old_option_id = int(link["option_id"])
            repository_options.insert_link(
                conn,
                question_id=question_map[int(link["question_id"])],
                option_id=option_map.get(old_option_id, old_option_id),
                index=int(link["index"]),
            )

    logger.info(
        "survey_versioned source_id=%s new_id=%s version=%s questions=%s options=%s links=%s",
        survey_id,
        new_survey_id,
        version,
        len(question_map),
        len(option_map),
        len(links),
    )
    events.publish(
        events.SURVEY_VERSIONED,
        {"source_id": survey_id, "survey_id": new_survey_id, "version": version},
    )
    return new_survey_id


__all__ = ["default_description", "resolve_description", "clone_as_new_version"]
