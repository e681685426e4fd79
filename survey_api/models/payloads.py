"""Pydantic models for request bodies.

Fields are optional at the schema level on purpose: presence and emptiness
rules belong to the logic layer, which reports them as FIELDS_MISSING with
the service's own error envelope. These models only pin down types.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SurveyCreate(_Payload):
    name: Optional[str] = None
    description: Optional[str] = None


class SurveyUpdate(_Payload):
    description: Optional[str] = None


class VersionCreate(_Payload):
    description: Optional[str] = None


class QuestionCreate(_Payload):
    description: Optional[str] = None
    note: Optional[str] = None
    mandatory: Optional[bool] = None
    type: Optional[str] = None
    attachments: Optional[bool] = None


class QuestionUpdate(QuestionCreate):
    pass


class Reorder(_Payload):
    direction: Optional[str] = None


class OptionAttach(_Payload):
    # Either an existing option id, or value+description for a new CUSTOM option
    option_id: Optional[int] = None
    value: Optional[str] = None
    description: Optional[str] = None


class SystemOptionCreate(_Payload):
    value: Optional[str] = None
    description: Optional[str] = None


class AccessGrantCreate(_Payload):
    user_id: Optional[int] = None


class RecordCreate(_Payload):
    subject_name: Optional[str] = None
    subject_description: Optional[str] = None


class AnswerUpdate(_Payload):
    question_id: Optional[int] = None
    text: Optional[str] = None
    radio: Optional[int] = None
    checkbox: Optional[List[int]] = None


__all__ = [
    "SurveyCreate",
    "SurveyUpdate",
    "VersionCreate",
    "QuestionCreate",
    "QuestionUpdate",
    "Reorder",
    "OptionAttach",
    "SystemOptionCreate",
    "AccessGrantCreate",
    "RecordCreate",
    "AnswerUpdate",
]
