"""System options catalogue endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from survey_api.http.principal import current_principal
from survey_api.logic import authoring
from survey_api.models.payloads import SystemOptionCreate
from survey_api.models.principal import Principal

router = APIRouter()


@router.post(
    "/options",
    summary="Create a SYSTEM option shared by all surveys",
    operation_id="createSystemOption",
    tags=["Options"],
    status_code=201,
)
def create_system_option(payload: SystemOptionCreate, principal: Principal = Depends(current_principal)):
    return authoring.create_system_option(principal, payload.value, payload.description)


@router.get(
    "/options/search",
    summary="Search SYSTEM options by value or description",
    operation_id="searchSystemOptions",
    tags=["Options"],
)
def search_system_options(
    string: str = Query("", description="Substring to match"),
    principal: Principal = Depends(current_principal),
):
    return authoring.search_system_options(string)


__all__ = ["router", "create_system_option", "search_system_options"]
