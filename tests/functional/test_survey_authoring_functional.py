"""Functional tests for survey lifecycle and structure authoring.

Service functions are called directly against the functional SQLite
database; HTTP concerns are covered by the API contract tests.
"""

from __future__ import annotations

import pytest

from survey_api.logic import authoring, events, survey_lifecycle
from survey_api.logic.errors import Conflict, Forbidden, NotFound, ValidationError


def _survey(admin, name: str = "Census") -> int:
    return survey_lifecycle.create_survey(admin, name, "Household census")["id"]


def _question(admin, survey_id: int, description: str, **fields) -> int:
    return authoring.create_question(survey_id, admin, {"description": description, **fields})["id"]


def _indices(admin, survey_id: int) -> dict[int, int]:
    return {q["id"]: q["index"] for q in authoring.list_questions(survey_id, admin)}


def test_create_survey_starts_unlocked_at_version_one(admin) -> None:
    survey = survey_lifecycle.create_survey(admin, "  Census ", None)
    assert survey["name"] == "Census"
    assert survey["version"] == 1
    assert survey["status"] == "UNLOCKED"
    assert survey["is_deleted"] is False
    assert survey["created_by"] == admin.id
    assert events.get_buffered_events()[-1]["type"] == events.SURVEY_CREATED


def test_events_are_only_buffered_when_enabled(admin, monkeypatch) -> None:
    monkeypatch.setenv("BUFFER_DOMAIN_EVENTS", "0")
    _survey(admin)
    assert events.get_buffered_events() == []

    monkeypatch.setenv("BUFFER_DOMAIN_EVENTS", "1")
    _survey(admin, "Census B")
    assert [e["type"] for e in events.get_buffered_events()] == [events.SURVEY_CREATED]

def test_create_survey_requires_admin_and_unique_name(admin, collector_user) -> None:
    with pytest.raises(Forbidden):
        survey_lifecycle.create_survey(collector_user, "Census", None)
    _survey(admin)
    with pytest.raises(Conflict) as exc:
        survey_lifecycle.create_survey(admin, "Census", "again")
    assert exc.value.code == "SURVEY_NAME_EXISTS"
    with pytest.raises(ValidationError):
        survey_lifecycle.create_survey(admin, "   ", None)


def test_questions_get_contiguous_indices_and_defaults(admin) -> None:
    sid = _survey(admin)
    q1 = authoring.create_question(sid, admin, {"description": "Name?"})
    q2 = authoring.create_question(sid, admin, {"description": "Colour?", "type": "radio", "mandatory": False})
    assert (q1["index"], q2["index"]) == (1, 2)
    assert q1["type"] == "TEXT" and q1["mandatory"] is True and q1["attachments"] is False
    assert q2["type"] == "RADIO" and q2["mandatory"] is False


def test_create_question_rejects_unknown_type(admin) -> None:
    sid = _survey(admin)
    with pytest.raises(ValidationError) as exc:
        authoring.create_question(sid, admin, {"description": "Q", "type": "SLIDER"})
    assert exc.value.code == "QUESTION_TYPE_INVALID"


def test_swap_second_question_up(admin) -> None:
    sid = _survey(admin)
    q1 = _question(admin, sid, "Q1")
    q2 = _question(admin, sid, "Q2")
    ordered = authoring.reorder_question(sid, q2, admin, "UP")
    assert [q["id"] for q in ordered] == [q2, q1]
    assert _indices(admin, sid) == {q1: 2, q2: 1}


def test_delete_middle_question_compacts(admin) -> None:
    sid = _survey(admin)
    q1, q2, q3 = (_question(admin, sid, f"Q{n}") for n in (1, 2, 3))
    assert authoring.delete_question(sid, q2, admin) == 2
    assert _indices(admin, sid) == {q1: 1, q3: 2}
    q4 = _question(admin, sid, "Q4")
    assert _indices(admin, sid) == {q1: 1, q3: 2, q4: 3}
    with pytest.raises(NotFound):
        authoring.get_question(sid, q2, admin)


def test_attach_detach_and_reorder_options(admin) -> None:
    sid = _survey(admin)
    qid = _question(admin, sid, "Colour?", type="RADIO")
    system = authoring.create_system_option(admin, "yes", "Yes")
    red = authoring.attach_option(sid, qid, admin, {"value": "red", "description": "Red"})
    linked = authoring.attach_option(sid, qid, admin, {"option_id": system["id"]})
    assert (red["index"], linked["index"]) == (1, 2)
    assert red["type"] == "CUSTOM" and red["survey_id"] == sid

    options = authoring.reorder_option(sid, qid, system["id"], admin, "UP")
    assert [o["id"] for o in options] == [system["id"], red["id"]]

    assert authoring.detach_option(sid, qid, system["id"], admin) == 1
    remaining = authoring.get_question(sid, qid, admin)["options"]
    assert [(o["id"], o["index"]) for o in remaining] == [(red["id"], 1)]


def test_attach_duplicate_and_foreign_custom_option_rejected(admin) -> None:
    sid = _survey(admin)
    other_sid = _survey(admin, "Other")
    qid = _question(admin, sid, "Q")
    other_qid = _question(admin, other_sid, "Q")
    foreign = authoring.attach_option(other_sid, other_qid, admin, {"value": "x", "description": "X"})
    with pytest.raises(Conflict) as exc:
        authoring.attach_option(sid, qid, admin, {"option_id": foreign["id"]})
    assert exc.value.code == "OPTION_NOT_LINKABLE"

    own = authoring.attach_option(sid, qid, admin, {"value": "a", "description": "A"})
    with pytest.raises(Conflict) as exc:
        authoring.attach_option(sid, qid, admin, {"option_id": own["id"]})
    assert exc.value.code == "DUPLICATE_ENTRY"


def test_reattaching_detached_option_revives_link_at_end(admin) -> None:
    sid = _survey(admin)
    qid = _question(admin, sid, "Q")
    a = authoring.attach_option(sid, qid, admin, {"value": "a", "description": "A"})
    b = authoring.attach_option(sid, qid, admin, {"value": "b", "description": "B"})
    authoring.detach_option(sid, qid, a["id"], admin)
    revived = authoring.attach_option(sid, qid, admin, {"option_id": a["id"]})
    assert revived["link_id"] == a["link_id"]
    options = authoring.get_question(sid, qid, admin)["options"]
    assert [(o["id"], o["index"]) for o in options] == [(b["id"], 1), (a["id"], 2)]


def test_update_description_requires_a_value(admin) -> None:
    sid = _survey(admin)
    with pytest.raises(ValidationError) as exc:
        survey_lifecycle.update_description(sid, admin, None)
    assert exc.value.code == "FIELDS_MISSING"
    assert authoring.get_survey_detail(sid, admin)["description"] == "Household census"

    updated = survey_lifecycle.update_description(sid, admin, "Spring census")
    assert updated["description"] == "Spring census"

def test_locked_survey_rejects_structural_edits(admin) -> None:
    sid = _survey(admin)
    qid = _question(admin, sid, "Q")
    locked = survey_lifecycle.lock_survey(sid, admin)
    assert locked["status"] == "LOCKED" and locked["locked_at"]

    with pytest.raises(Conflict) as exc:
        survey_lifecycle.update_description(sid, admin, "changed")
    assert exc.value.code == "SURVEY_LOCKED"
    with pytest.raises(Conflict):
        authoring.create_question(sid, admin, {"description": "late"})
    with pytest.raises(Conflict):
        authoring.reorder_question(sid, qid, admin, "DOWN")
    with pytest.raises(Conflict) as exc:
        survey_lifecycle.lock_survey(sid, admin)
    assert exc.value.code == "SURVEY_ALREADY_LOCKED"


def test_lock_with_grant_on_lock_grants_locking_admin(admin) -> None:
    from survey_api.logic import access_ledger

    sid = _survey(admin)
    survey_lifecycle.lock_survey(sid, admin, grant_on_lock=True)
    grants = access_ledger.list_access(sid, admin)
    assert [(g["user_id"], g["is_active"]) for g in grants] == [(admin.id, True)]


def test_delete_survey_cascades_and_is_idempotent(admin, collector_user) -> None:
    sid = _survey(admin)
    qid = _question(admin, sid, "Q")
    authoring.attach_option(sid, qid, admin, {"value": "a", "description": "A"})
    assert survey_lifecycle.delete_survey(sid, admin) == {"questions": 1, "links": 1, "options": 1}
    assert survey_lifecycle.delete_survey(sid, admin) == {"questions": 0, "links": 0, "options": 0}

    detail = authoring.get_survey_detail(sid, admin)
    assert detail["is_deleted"] is True and detail["questions"] == []
    with pytest.raises(NotFound):
        authoring.get_survey_detail(sid, collector_user)
    with pytest.raises(Conflict) as exc:
        survey_lifecycle.lock_survey(sid, admin)
    assert exc.value.code == "SURVEY_DELETED"
    assert [s["id"] for s in survey_lifecycle.list_surveys(admin)] == []
    assert [s["id"] for s in survey_lifecycle.list_surveys(admin, include_deleted=True)] == [sid]


def test_survey_detail_orders_questions_and_options(admin) -> None:
    sid = _survey(admin)
    q1 = _question(admin, sid, "First", type="CHECKBOX")
    q2 = _question(admin, sid, "Second")
    authoring.attach_option(sid, q1, admin, {"value": "a", "description": "A"})
    authoring.attach_option(sid, q1, admin, {"value": "b", "description": "B"})
    authoring.reorder_question(sid, q2, admin, "UP")

    detail = authoring.get_survey_detail(sid, admin)
    assert [q["description"] for q in detail["questions"]] == ["Second", "First"]
    assert [o["value"] for o in detail["questions"][1]["options"]] == ["a", "b"]
    assert detail["questions"][0]["options"] == []


def test_search_system_options_matches_value_or_description(admin) -> None:
    authoring.create_system_option(admin, "yes", "Affirmative")
    authoring.create_system_option(admin, "no", "Negative")
    assert [o["value"] for o in authoring.search_system_options("firm")] == ["yes"]
    assert [o["value"] for o in authoring.search_system_options("")] == ["yes", "no"]
