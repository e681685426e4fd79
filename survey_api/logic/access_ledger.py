"""Admin operations over the per-(survey, user) access grants."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from survey_api.db.base import read_only, transaction
from survey_api.logic import repository_access, repository_users
from survey_api.logic.errors import NotFound, translate_storage_errors
from survey_api.logic.permissions import require_admin
from survey_api.logic.survey_lifecycle import load_survey
from survey_api.models.principal import Principal

logger = logging.getLogger(__name__)


def grant_access(survey_id: int, user_id: int, principal: Principal) -> Dict[str, Any]:
    require_admin(principal)
    with translate_storage_errors("grant_access"), transaction() as conn:
        load_survey(conn, survey_id)
        if repository_users.get_user(conn, user_id) is None:
            raise NotFound("User not found", code="USER_NOT_FOUND")
        grant_id = repository_access.grant(conn, survey_id, user_id)
    logger.info("access_granted survey_id=%s user_id=%s by=%s", survey_id, user_id, principal.id)
    return {"id": grant_id, "survey_id": survey_id, "user_id": user_id, "is_active": True}


def revoke_access(survey_id: int, user_id: int, principal: Principal) -> None:
    require_admin(principal)
    with translate_storage_errors("revoke_access"), transaction() as conn:
        load_survey(conn, survey_id)
        if not repository_access.revoke(conn, survey_id, user_id):
            raise NotFound("No access grant for this user", code="USER_NOT_FOUND")
    logger.info("access_revoked survey_id=%s user_id=%s by=%s", survey_id, user_id, principal.id)


def list_access(survey_id: int, principal: Principal) -> List[Dict[str, Any]]:
    require_admin(principal)
    with translate_storage_errors("list_access"), read_only() as conn:
        load_survey(conn, survey_id)
        return repository_access.list_grants(conn, survey_id)


__all__ = ["grant_access", "revoke_access", "list_access"]
