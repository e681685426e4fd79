"""Survey lifecycle endpoints: create, read, describe, lock, version, delete."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from survey_api.config import load_config
from survey_api.http.principal import current_principal
from survey_api.logic import authoring, survey_lifecycle, versioning
from survey_api.models.payloads import SurveyCreate, SurveyUpdate, VersionCreate
from survey_api.models.principal import Principal

router = APIRouter()


@router.get(
    "/surveys",
    summary="List surveys",
    operation_id="listSurveys",
    tags=["Surveys"],
)
def list_surveys(include_deleted: bool = False, principal: Principal = Depends(current_principal)):
    return survey_lifecycle.list_surveys(principal, include_deleted=include_deleted)


@router.post(
    "/surveys",
    summary="Create a survey (version 1, UNLOCKED)",
    operation_id="createSurvey",
    tags=["Surveys"],
    status_code=201,
)
def create_survey(payload: SurveyCreate, principal: Principal = Depends(current_principal)):
    return survey_lifecycle.create_survey(principal, payload.name, payload.description)


@router.get(
    "/surveys/{survey_id}",
    summary="Get a survey with its ordered questions and options",
    operation_id="getSurvey",
    tags=["Surveys"],
)
def get_survey(survey_id: int, principal: Principal = Depends(current_principal)):
    return authoring.get_survey_detail(survey_id, principal)


@router.put(
    "/surveys/{survey_id}",
    summary="Update a survey's description",
    operation_id="updateSurvey",
    tags=["Surveys"],
)
def update_survey(survey_id: int, payload: SurveyUpdate, principal: Principal = Depends(current_principal)):
    return survey_lifecycle.update_description(survey_id, principal, payload.description)


@router.delete(
    "/surveys/{survey_id}",
    summary="Soft-delete a survey and its structure",
    operation_id="deleteSurvey",
    tags=["Surveys"],
)
def delete_survey(survey_id: int, principal: Principal = Depends(current_principal)):
    flagged = survey_lifecycle.delete_survey(survey_id, principal)
    return {"survey_id": survey_id, "deleted": flagged}


@router.post(
    "/surveys/{survey_id}/lock",
    summary="Lock a survey's structure",
    operation_id="lockSurvey",
    tags=["Surveys"],
)
def lock_survey(survey_id: int, principal: Principal = Depends(current_principal)):
    grant_on_lock = load_config().lifecycle.grant_on_lock
    return survey_lifecycle.lock_survey(survey_id, principal, grant_on_lock=grant_on_lock)


@router.post(
    "/surveys/{survey_id}/version",
    summary="Clone a locked survey as a new UNLOCKED version",
    operation_id="versionSurvey",
    tags=["Surveys"],
    status_code=201,
)
def version_survey(
    survey_id: int,
    response: Response,
    payload: VersionCreate | None = None,
    principal: Principal = Depends(current_principal),
):
    new_id = versioning.clone_as_new_version(
        survey_id,
        principal,
        requested_description=payload.description if payload else None,
    )
    response.headers["Location"] = f"/api/v1/surveys/{new_id}"
    return authoring.get_survey_detail(new_id, principal)


__all__ = [
    "router",
    "list_surveys",
    "create_survey",
    "get_survey",
    "update_survey",
    "delete_survey",
    "lock_survey",
    "version_survey",
]
