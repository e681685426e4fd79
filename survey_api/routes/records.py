"""Record endpoints: open, list, read and delete collection records."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from survey_api.http.principal import current_principal
from survey_api.logic import collector
from survey_api.models.payloads import RecordCreate
from survey_api.models.principal import Principal

router = APIRouter()


@router.get(
    "/surveys/{survey_id}/records",
    summary="List records of a survey",
    operation_id="listRecords",
    tags=["Records"],
)
def list_records(survey_id: int, principal: Principal = Depends(current_principal)):
    return collector.list_records(survey_id, principal)


@router.post(
    "/surveys/{survey_id}/records",
    summary="Open a record with one blank answer per question",
    operation_id="createRecord",
    tags=["Records"],
    status_code=201,
)
def create_record(survey_id: int, payload: RecordCreate, principal: Principal = Depends(current_principal)):
    return collector.create_record(survey_id, principal, payload.subject_name, payload.subject_description)


@router.get(
    "/records/{record_id}",
    summary="Get a record with its answers",
    operation_id="getRecord",
    tags=["Records"],
)
def get_record(record_id: int, principal: Principal = Depends(current_principal)):
    return collector.get_record(record_id, principal)


@router.delete(
    "/records/{record_id}",
    summary="Soft-delete a record",
    operation_id="deleteRecord",
    tags=["Records"],
    status_code=204,
)
def delete_record(record_id: int, principal: Principal = Depends(current_principal)):
    collector.delete_record(record_id, principal)
    return Response(status_code=204)


__all__ = ["router", "list_records", "create_record", "get_record", "delete_record"]
