"""Central error mapping for service errors.

Single source of truth for mapping stable error codes to problem+json titles
and HTTP statuses. Logic modules raise by code; the HTTP layer looks the
status up here instead of hardcoding numbers.
"""

from __future__ import annotations

UNAUTHORIZED = {"title": "Unauthorized", "status": 401}
FORBIDDEN = {"title": "Forbidden", "status": 403}
NOT_FOUND = {"title": "Not Found", "status": 404}
CONFLICT = {"title": "Conflict", "status": 409}
VALIDATION = {"title": "Invalid Request", "status": 400}
INTERNAL = {"title": "Internal Server Error", "status": 500}

ERROR_MAP = {
    # Authentication boundary
    "AUTH_TOKEN_MISSING": UNAUTHORIZED,
    "AUTH_TOKEN_INVALID": UNAUTHORIZED,
    # Authorisation
    "ADMIN_REQUIRED": FORBIDDEN,
    "ACCESS_NOT_GRANTED": FORBIDDEN,
    "RECORD_NOT_OWNED": FORBIDDEN,
    # Missing entities
    "SURVEY_NOT_FOUND": NOT_FOUND,
    "QUESTION_NOT_FOUND": NOT_FOUND,
    "OPTION_NOT_FOUND": NOT_FOUND,
    "LINK_NOT_FOUND": NOT_FOUND,
    "RECORD_NOT_FOUND": NOT_FOUND,
    "ANSWER_NOT_FOUND": NOT_FOUND,
    "USER_NOT_FOUND": NOT_FOUND,
    # State preconditions
    "SURVEY_LOCKED": CONFLICT,
    "SURVEY_DELETED": CONFLICT,
    "SURVEY_ALREADY_LOCKED": CONFLICT,
    "SURVEY_NOT_LOCKED": CONFLICT,
    "SURVEY_NAME_EXISTS": CONFLICT,
    "OPTION_NOT_LINKABLE": CONFLICT,
    "RECORD_ALREADY_SUBMITTED": CONFLICT,
    "DUPLICATE_ENTRY": CONFLICT,
    # Input validation
    "FIELDS_MISSING": VALIDATION,
    "REQUEST_INVALID": VALIDATION,
    "QUESTION_TYPE_INVALID": VALIDATION,
    "ORDER_INVALID_DIRECTION": VALIDATION,
    "ORDER_OUT_OF_RANGE": VALIDATION,
    "ORDER_NO_ADJACENT_ITEM": VALIDATION,
    "ANSWERS_INCOMPLETE": VALIDATION,
    "ANSWER_OPTION_INVALID": VALIDATION,
    # Storage
    "STORAGE_FAILURE": INTERNAL,
}


def lookup(code: str, fallback_status: int = 500) -> dict:
    """Return `{title, status}` for a code, falling back on the given status."""
    entry = ERROR_MAP.get(code)
    if entry is not None:
        return entry
    for candidate in (UNAUTHORIZED, FORBIDDEN, NOT_FOUND, CONFLICT, VALIDATION, INTERNAL):
        if candidate["status"] == fallback_status:
            return candidate
    return INTERNAL


__all__ = ["ERROR_MAP", "lookup"]
