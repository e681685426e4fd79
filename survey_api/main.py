from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from survey_api.config import load_config
from survey_api.db.base import get_engine
from survey_api.db.migrations_runner import apply_migrations
from survey_api.http.problem import (
    handle_request_validation_error,
    handle_service_error,
    handle_unexpected_error,
)
from survey_api.http.request_id import RequestIdMiddleware
from survey_api.logging_setup import configure_logging
from survey_api.logic.errors import ServiceError
from survey_api.middleware.cors import apply_cors
from survey_api.routes import api_router

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _migrations_dir(dialect: str) -> Path:
    return PROJECT_ROOT / ("sqlite_migrations" if dialect == "sqlite" else "migrations")


def _health_check() -> Callable[[], dict]:
    def check() -> dict:
        try:
            with get_engine().connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": e.__class__.__name__}

    return check


def _apply_startup_migrations() -> None:
    enable_flag = os.getenv("AUTO_APPLY_MIGRATIONS", "").strip().lower() in {"1", "true", "yes", "on"}
    if not enable_flag:
        logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
        return
    engine = get_engine()
    try:
        applied = apply_migrations(engine, _migrations_dir(engine.dialect.name))
    except SQLAlchemyError:
        logger.error("Failed to apply migrations at startup", exc_info=True)
        raise
    logger.info("startup_migrations_applied count=%s", len(applied))


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Apply migrations on startup (guarded) to avoid import-time side effects
    _apply_startup_migrations()
    yield


def create_app() -> FastAPI:
    # Configure global logging before app instantiation so all modules emit
    configure_logging()
    config = load_config()

    app = FastAPI(title="Survey Service", lifespan=_lifespan)
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)
    apply_cors(app, origins=config.cors.origins)

    app.include_router(api_router, prefix="/api/v1")

    health_check = _health_check()

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
