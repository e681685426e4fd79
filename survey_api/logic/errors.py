"""Service error taxonomy.

Every failure a core operation can report is one of these classes, carrying
a stable, storage-independent ``code`` (see `survey_api.http.error_mapping`)
and a human readable message. Storage exceptions are translated at the
transaction boundary by :func:`translate_storage_errors`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for all errors surfaced to callers."""

    status = 500
    default_code = "STORAGE_FAILURE"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class Unauthorized(ServiceError):
    status = 401
    default_code = "AUTH_TOKEN_INVALID"


class Forbidden(ServiceError):
    status = 403
    default_code = "ADMIN_REQUIRED"


class NotFound(ServiceError):
    status = 404
    default_code = "SURVEY_NOT_FOUND"


class Conflict(ServiceError):
    status = 409
    default_code = "DUPLICATE_ENTRY"


class ValidationError(ServiceError):
    status = 400
    default_code = "FIELDS_MISSING"


class InternalError(ServiceError):
    status = 500
    default_code = "STORAGE_FAILURE"


# Ordering engine failures


class InvalidDirection(ValidationError):
    default_code = "ORDER_INVALID_DIRECTION"


class OutOfRange(ValidationError):
    default_code = "ORDER_OUT_OF_RANGE"


class NoAdjacentItem(ValidationError):
    default_code = "ORDER_NO_ADJACENT_ITEM"


@contextmanager
def translate_storage_errors(operation: str) -> Iterator[None]:
    """Map storage exceptions raised inside the block onto the taxonomy.

    Unique and foreign key violations become Conflict; anything else from the
    driver becomes InternalError. Service errors pass through untouched.
    """
    try:
        yield
    except ServiceError:
        raise
    except IntegrityError as exc:
        logger.warning("storage_integrity_violation operation=%s error=%s", operation, exc.orig)
        raise Conflict(
            "The change conflicts with existing data; it may have been applied concurrently",
            code="DUPLICATE_ENTRY",
        ) from exc
    except SQLAlchemyError as exc:
        logger.error("storage_failure operation=%s", operation, exc_info=True)
        raise InternalError("Internal Server Error", code="STORAGE_FAILURE") from exc


__all__ = [
    "ServiceError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "Conflict",
    "ValidationError",
    "InternalError",
    "InvalidDirection",
    "OutOfRange",
    "NoAdjacentItem",
    "translate_storage_errors",
]
