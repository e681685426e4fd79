"""Answer endpoints: list, fill in and submit a record's answers."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from survey_api.config import load_config
from survey_api.http.principal import current_principal
from survey_api.logic import collector
from survey_api.models.payloads import AnswerUpdate
from survey_api.models.principal import Principal

router = APIRouter()


@router.get(
    "/records/{record_id}/answers",
    summary="List a record's answers in question order",
    operation_id="listAnswers",
    tags=["Answers"],
)
def list_answers(record_id: int, principal: Principal = Depends(current_principal)):
    return collector.list_answers(record_id, principal)


@router.put(
    "/records/{record_id}/answers/{answer_id}",
    summary="Overwrite one answer",
    operation_id="updateAnswer",
    tags=["Answers"],
)
def update_answer(
    record_id: int,
    answer_id: int,
    payload: AnswerUpdate,
    principal: Principal = Depends(current_principal),
):
    return collector.update_answer(
        record_id,
        answer_id,
        principal,
        payload.model_dump(include={"text", "radio", "checkbox"}),
        question_id=payload.question_id,
        seal_submitted=load_config().collector.seal_submitted_records,
    )


@router.post(
    "/records/{record_id}/submit",
    summary="Submit a record once its answers are complete",
    operation_id="submitRecord",
    tags=["Answers"],
)
def submit_record(record_id: int, principal: Principal = Depends(current_principal)):
    return collector.submit(
        record_id,
        principal,
        seal_submitted=load_config().collector.seal_submitted_records,
    )


__all__ = ["router", "list_answers", "update_answer", "submit_record"]
