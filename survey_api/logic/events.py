"""Domain event constants and publisher.

Defines event type constants and a publish() callable used by the lifecycle,
versioning and collection flows. Events are logged and carry identifiers
only, never answer content.

When ``events.buffer`` is enabled (env ``BUFFER_DOMAIN_EVENTS``) the most
recent events are also kept in a bounded in-memory buffer for in-process
inspection, which is how the functional tests observe them. The buffer holds
no domain state and nothing reads it back into an operation.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List
import logging

from survey_api.config import load_config

logger = logging.getLogger(__name__)

SURVEY_CREATED = "survey.created"
SURVEY_LOCKED = "survey.locked"
SURVEY_VERSIONED = "survey.versioned"
SURVEY_DELETED = "survey.deleted"
RECORD_CREATED = "record.created"
RECORD_SUBMITTED = "record.submitted"
RECORD_DELETED = "record.deleted"

_BUFFER_SIZE = 1000
EVENT_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=_BUFFER_SIZE)


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Publish a domain event.

    Call only after the transaction that produced it has committed.
    """
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    if load_config().events.buffer:
        EVENT_BUFFER.append({"type": event_type, "payload": payload})


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "SURVEY_CREATED",
    "SURVEY_LOCKED",
    "SURVEY_VERSIONED",
    "SURVEY_DELETED",
    "RECORD_CREATED",
    "RECORD_SUBMITTED",
    "RECORD_DELETED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
