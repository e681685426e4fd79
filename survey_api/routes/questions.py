"""Question and option-link authoring endpoints for UNLOCKED surveys."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from survey_api.http.principal import current_principal
from survey_api.logic import authoring
from survey_api.models.payloads import OptionAttach, QuestionCreate, QuestionUpdate, Reorder
from survey_api.models.principal import Principal

router = APIRouter()


@router.get(
    "/surveys/{survey_id}/questions",
    summary="List a survey's questions in order",
    operation_id="listQuestions",
    tags=["Questions"],
)
def list_questions(survey_id: int, principal: Principal = Depends(current_principal)):
    return authoring.list_questions(survey_id, principal)


@router.post(
    "/surveys/{survey_id}/questions",
    summary="Append a question to a survey",
    operation_id="createQuestion",
    tags=["Questions"],
    status_code=201,
)
def create_question(survey_id: int, payload: QuestionCreate, principal: Principal = Depends(current_principal)):
    return authoring.create_question(survey_id, principal, payload.model_dump())


@router.get(
    "/surveys/{survey_id}/questions/{question_id}",
    summary="Get a question with its ordered options",
    operation_id="getQuestion",
    tags=["Questions"],
)
def get_question(survey_id: int, question_id: int, principal: Principal = Depends(current_principal)):
    return authoring.get_question(survey_id, question_id, principal)


@router.put(
    "/surveys/{survey_id}/questions/{question_id}",
    summary="Update a question",
    operation_id="updateQuestion",
    tags=["Questions"],
)
def update_question(
    survey_id: int,
    question_id: int,
    payload: QuestionUpdate,
    principal: Principal = Depends(current_principal),
):
    return authoring.update_question(survey_id, question_id, principal, payload.model_dump())


@router.delete(
    "/surveys/{survey_id}/questions/{question_id}",
    summary="Delete a question and close the gap in ordering",
    operation_id="deleteQuestion",
    tags=["Questions"],
    status_code=204,
)
def delete_question(survey_id: int, question_id: int, principal: Principal = Depends(current_principal)):
    authoring.delete_question(survey_id, question_id, principal)
    return Response(status_code=204)


@router.post(
    "/surveys/{survey_id}/questions/{question_id}/reorder",
    summary="Move a question UP or DOWN by one position",
    operation_id="reorderQuestion",
    tags=["Questions"],
)
def reorder_question(
    survey_id: int,
    question_id: int,
    payload: Reorder,
    principal: Principal = Depends(current_principal),
):
    return authoring.reorder_question(survey_id, question_id, principal, payload.direction)


@router.post(
    "/surveys/{survey_id}/questions/{question_id}/options",
    summary="Attach an existing option or a new custom option",
    operation_id="attachOption",
    tags=["Options"],
    status_code=201,
)
def attach_option(
    survey_id: int,
    question_id: int,
    payload: OptionAttach,
    principal: Principal = Depends(current_principal),
):
    return authoring.attach_option(survey_id, question_id, principal, payload.model_dump())


@router.delete(
    "/surveys/{survey_id}/questions/{question_id}/options/{option_id}",
    summary="Detach an option from a question",
    operation_id="detachOption",
    tags=["Options"],
    status_code=204,
)
def detach_option(
    survey_id: int,
    question_id: int,
    option_id: int,
    principal: Principal = Depends(current_principal),
):
    authoring.detach_option(survey_id, question_id, option_id, principal)
    return Response(status_code=204)


@router.post(
    "/surveys/{survey_id}/questions/{question_id}/options/{option_id}/reorder",
    summary="Move an option UP or DOWN by one position",
    operation_id="reorderOption",
    tags=["Options"],
)
def reorder_option(
    survey_id: int,
    question_id: int,
    option_id: int,
    payload: Reorder,
    principal: Principal = Depends(current_principal),
):
    return authoring.reorder_option(survey_id, question_id, option_id, principal, payload.direction)


__all__ = [
    "router",
    "list_questions",
    "create_question",
    "get_question",
    "update_question",
    "delete_question",
    "reorder_question",
    "attach_option",
    "detach_option",
    "reorder_option",
]
