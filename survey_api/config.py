"""Configuration utilities for the Survey Service.

This module loads application configuration with the following rules:
- Primary source: `survey_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("survey_config.json")
logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: an unreadable override falls through to the next source
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _as_bool(text: Optional[str]) -> bool:
    return str(text or "").strip().lower() in _TRUE_VALUES


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class AuthConfig(BaseModel):
    secret: str = Field(min_length=1)
    algorithm: str = "HS256"

    @field_validator("algorithm")
    @classmethod
    def algorithm_must_be_hmac(cls, v: str) -> str:
        allowed = {"HS256", "HS384", "HS512"}
        if v not in allowed:
            raise ValueError(f"auth.algorithm must be one of {sorted(allowed)}")
        return v


class LifecycleConfig(BaseModel):
    # Grants the locking admin an access grant on the survey they lock
    grant_on_lock: bool = False


class CollectorConfig(BaseModel):
    # Rejects re-submission and answer edits once a record has been submitted
    seal_submitted_records: bool = False


class EventsConfig(BaseModel):
    # Keeps recently published events in memory for in-process inspection
    buffer: bool = False


class CorsConfig(BaseModel):
    origins: List[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    database: DatabaseConfig
    auth: AuthConfig
    lifecycle: LifecycleConfig
    collector: CollectorConfig
    events: EventsConfig
    cors: CorsConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) survey_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )

    secret = _env("SECRET") or _read_config_file("auth.secret") or _base("auth.secret") or "change-me"
    algorithm = (_env("JWT_ALGORITHM") or _read_config_file("auth.algorithm") or _base("auth.algorithm", "HS256")).strip()

    grant_on_lock = _env("GRANT_ON_LOCK") or _read_config_file("lifecycle.grant_on_lock") or _base("lifecycle.grant_on_lock", "false")
    seal_submitted = (
        _env("SEAL_SUBMITTED_RECORDS")
        or _read_config_file("collector.seal_submitted_records")
        or _base("collector.seal_submitted_records", "false")
    )

    buffer_events = _env("BUFFER_DOMAIN_EVENTS") or _read_config_file("events.buffer") or _base("events.buffer", "false")

    origins_text = _env("CORS_ORIGINS") or _read_config_file("cors.origins")
    if origins_text:
        origins = [o.strip() for o in origins_text.split(",") if o.strip()]
    else:
        raw_origins = base.get("cors", {}).get("origins") if isinstance(base.get("cors"), dict) else None
        origins = [str(o) for o in raw_origins] if isinstance(raw_origins, list) else ["*"]

    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn),
            auth=AuthConfig(secret=secret, algorithm=algorithm),
            lifecycle=LifecycleConfig(grant_on_lock=_as_bool(grant_on_lock)),
            collector=CollectorConfig(seal_submitted_records=_as_bool(seal_submitted)),
            events=EventsConfig(buffer=_as_bool(buffer_events)),
            cors=CorsConfig(origins=origins or ["*"]),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "AuthConfig",
    "LifecycleConfig",
    "CollectorConfig",
    "EventsConfig",
    "CorsConfig",
    "load_config",
]
