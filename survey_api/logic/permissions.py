"""Role and grant checks applied by core operations to an explicit principal."""

from __future__ import annotations

from sqlalchemy.engine import Connection

from survey_api.logic import repository_access
from survey_api.logic.errors import Forbidden
from survey_api.models.principal import Principal


def require_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise Forbidden("Unauthorized", code="ADMIN_REQUIRED")


def require_grant(conn: Connection, survey_id: int, principal: Principal) -> None:
    if not repository_access.is_active(conn, survey_id, principal.id):
        raise Forbidden("Access to this survey has not been granted", code="ACCESS_NOT_GRANTED")


__all__ = ["require_admin", "require_grant"]
