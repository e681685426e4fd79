"""Access grant endpoints (admin only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from survey_api.http.principal import current_principal
from survey_api.logic import access_ledger
from survey_api.logic.errors import ValidationError
from survey_api.models.payloads import AccessGrantCreate
from survey_api.models.principal import Principal

router = APIRouter()


@router.get(
    "/surveys/{survey_id}/accesses",
    summary="List access grants of a survey",
    operation_id="listAccesses",
    tags=["Access"],
)
def list_accesses(survey_id: int, principal: Principal = Depends(current_principal)):
    return access_ledger.list_access(survey_id, principal)


@router.post(
    "/surveys/{survey_id}/accesses",
    summary="Grant a user access to a survey",
    operation_id="grantAccess",
    tags=["Access"],
    status_code=201,
)
def grant_access(survey_id: int, payload: AccessGrantCreate, principal: Principal = Depends(current_principal)):
    if payload.user_id is None:
        raise ValidationError("Some values are missing", code="FIELDS_MISSING")
    return access_ledger.grant_access(survey_id, payload.user_id, principal)


@router.delete(
    "/surveys/{survey_id}/accesses/{user_id}",
    summary="Revoke a user's access to a survey",
    operation_id="revokeAccess",
    tags=["Access"],
    status_code=204,
)
def revoke_access(survey_id: int, user_id: int, principal: Principal = Depends(current_principal)):
    access_ledger.revoke_access(survey_id, user_id, principal)
    return Response(status_code=204)


__all__ = ["router", "list_accesses", "grant_access", "revoke_access"]
