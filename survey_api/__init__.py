"""FastAPI application package for the Survey Service.

This package exposes a small FastAPI application factory. It wires only
cross-cutting middleware (request-id, CORS) and problem+json handlers, and
mounts the API routers. Business logic lives in `survey_api/logic/` and route
handlers in `survey_api/routes/`.
"""

from __future__ import annotations

from survey_api.main import create_app

__all__ = ["create_app"]
