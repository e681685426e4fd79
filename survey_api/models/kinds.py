"""Enumerated column values for surveys, questions and options.

Plain constants containers rather than Enums so values bind directly into
SQL parameters and compare equal to what the database returns.
"""

from __future__ import annotations


class SurveyStatus:
    UNLOCKED = "UNLOCKED"
    LOCKED = "LOCKED"


class QuestionType:
    TEXT = "TEXT"
    RADIO = "RADIO"
    CHECKBOX = "CHECKBOX"
    NONE = "NONE"

    ALL = (TEXT, RADIO, CHECKBOX, NONE)


class OptionType:
    SYSTEM = "SYSTEM"
    CUSTOM = "CUSTOM"


class Direction:
    UP = "UP"
    DOWN = "DOWN"


__all__ = ["SurveyStatus", "QuestionType", "OptionType", "Direction"]
