"""APIRouter registration for the Survey Service."""

from __future__ import annotations

from fastapi import APIRouter

from survey_api.routes.accesses import router as accesses_router
from survey_api.routes.answers import router as answers_router
from survey_api.routes.options import router as options_router
from survey_api.routes.questions import router as questions_router
from survey_api.routes.records import router as records_router
from survey_api.routes.surveys import router as surveys_router

api_router = APIRouter()
api_router.include_router(surveys_router)
api_router.include_router(questions_router)
api_router.include_router(accesses_router)
api_router.include_router(options_router)
api_router.include_router(records_router)
api_router.include_router(answers_router)

__all__ = ["api_router"]
