"""Authentication boundary: `x-access-token` JWT to a typed Principal.

Tokens are HMAC-signed JWTs carrying the user's ``id``. The role is read
from the ``users`` row so a demoted user loses admin rights without waiting
for token expiry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header

from survey_api.config import load_config
from survey_api.db.base import read_only
from survey_api.logic import repository_users
from survey_api.logic.errors import Unauthorized, translate_storage_errors
from survey_api.models.principal import Principal

logger = logging.getLogger(__name__)


def issue_token(user_id: int, role: str, *, expires_in: timedelta = timedelta(hours=12)) -> str:
    """Create a signed access token for a user."""
    auth = load_config().auth
    now = datetime.now(timezone.utc)
    payload = {"id": int(user_id), "role": role, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, auth.secret, algorithm=auth.algorithm)


def decode_token(token: str) -> dict:
    """Verify and decode a token.

    Raises:
        Unauthorized: If the signature, expiry or claims are invalid
    """
    auth = load_config().auth
    try:
        claims = jwt.decode(token, auth.secret, algorithms=[auth.algorithm])
    except jwt.InvalidTokenError as exc:
        logger.info("auth_token_rejected reason=%s", exc.__class__.__name__)
        raise Unauthorized("Invalid token", code="AUTH_TOKEN_INVALID") from exc
    if not isinstance(claims.get("id"), int):
        raise Unauthorized("Invalid token", code="AUTH_TOKEN_INVALID")
    return claims


def resolve_principal(token: Optional[str]) -> Principal:
    if not token:
        raise Unauthorized("A token is required for authentication", code="AUTH_TOKEN_MISSING")
    claims = decode_token(token)
    with translate_storage_errors("resolve_principal"), read_only() as conn:
        user = repository_users.get_user(conn, claims["id"])
    if user is None:
        raise Unauthorized("Invalid token", code="AUTH_TOKEN_INVALID")
    return Principal(id=int(user["id"]), role=str(user["role"]))


def current_principal(x_access_token: Optional[str] = Header(None, alias="x-access-token")) -> Principal:
    """FastAPI dependency yielding the authenticated caller."""
    return resolve_principal(x_access_token)


__all__ = ["issue_token", "decode_token", "resolve_principal", "current_principal"]
