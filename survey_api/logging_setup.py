"""Logging configuration for the Survey Service.

One stdout console handler on the root logger. Service loggers under
``survey_api`` run at ``LOG_LEVEL`` (INFO by default) so lifecycle, versioning
and collection events are visible; the domain event stream can be raised or
silenced separately with ``EVENT_LOG_LEVEL``. SQLAlchemy's engine logger is
held at WARNING unless ``SQL_ECHO`` is set.
"""
from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from typing import Any, Dict, Optional

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _level(value: Optional[str], default: str) -> str:
    candidate = (value or "").strip().upper()
    return candidate if candidate in _LEVELS else default


def build_logging_config(
    level: Optional[str] = None,
    *,
    event_level: Optional[str] = None,
    sql_echo: bool = False,
) -> Dict[str, Any]:
    """Return the ``dictConfig`` mapping for the given levels."""
    service_level = _level(level, "INFO")
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s:%(name)s:%(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            "survey_api": {"level": service_level},
            "survey_api.logic.events": {"level": _level(event_level, service_level)},
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "sqlalchemy.engine": {"level": "INFO" if sql_echo else "WARNING"},
        },
    }


def configure_logging() -> None:
    """Apply the logging configuration from the environment, once.

    Returns early when the root logger already has handlers (reloaders and
    test runners install their own).
    """
    if logging.getLogger().handlers:
        return
    dictConfig(
        build_logging_config(
            os.environ.get("LOG_LEVEL"),
            event_level=os.environ.get("EVENT_LOG_LEVEL"),
            sql_echo=os.environ.get("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
        )
    )


__all__ = ["build_logging_config", "configure_logging"]
