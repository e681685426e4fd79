"""Problem+JSON rendering and global exception handlers.

Every error leaves the service as an RFC7807 document carrying the stable
``code`` of the failure alongside ``title``, ``status``, ``detail`` and
``message``.
"""

from __future__ import annotations

from typing import Any
import logging
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from survey_api.http.error_mapping import lookup
from survey_api.logic.errors import ServiceError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(code: str, message: str, *, status: int | None = None, **extra: Any) -> JSONResponse:
    entry = lookup(code, status or 500)
    resolved_status = int(status or entry["status"])
    body = {
        "title": entry["title"],
        "status": resolved_status,
        "detail": message,
        "message": message,
        "code": code,
        **extra,
    }
    return JSONResponse(body, status_code=resolved_status, media_type=PROBLEM_MEDIA_TYPE)


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:  # noqa: D401
    if exc.status >= 500:
        logger.error("service_error code=%s path=%s", exc.code, request.url.path, exc_info=exc)
    else:
        logger.info("service_rejected code=%s status=%s path=%s", exc.code, exc.status, request.url.path)
    return problem_response(exc.code, exc.message, status=exc.status)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    errors = jsonable_encoder(exc.errors())
    logger.info("request_invalid path=%s errors=%s", request.url.path, len(errors))
    return problem_response("REQUEST_INVALID", "Request validation failed", errors=errors)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response("STORAGE_FAILURE", "Internal Server Error", status=500)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_service_error",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
