"""Functional tests for records, answers and submission."""

from __future__ import annotations

import pytest

from survey_api.logic import access_ledger, authoring, collector, events, survey_lifecycle
from survey_api.logic.errors import Conflict, Forbidden, NotFound, ValidationError


@pytest.fixture
def survey(admin) -> dict:
    sid = survey_lifecycle.create_survey(admin, "Census", "Household census")["id"]
    text_q = authoring.create_question(sid, admin, {"description": "Name?"})["id"]
    radio_q = authoring.create_question(sid, admin, {"description": "Tenure?", "type": "RADIO"})["id"]
    check_q = authoring.create_question(sid, admin, {"description": "Pets?", "type": "CHECKBOX"})["id"]
    owned = authoring.attach_option(sid, radio_q, admin, {"value": "own", "description": "Owned"})["id"]
    rented = authoring.attach_option(sid, radio_q, admin, {"value": "rent", "description": "Rented"})["id"]
    cat = authoring.attach_option(sid, check_q, admin, {"value": "cat", "description": "Cat"})["id"]
    return {
        "id": sid,
        "text_q": text_q,
        "radio_q": radio_q,
        "check_q": check_q,
        "owned": owned,
        "rented": rented,
        "cat": cat,
    }


@pytest.fixture
def open_record(admin, collector_user, survey) -> dict:
    survey_lifecycle.lock_survey(survey["id"], admin)
    access_ledger.grant_access(survey["id"], collector_user.id, admin)
    return collector.create_record(survey["id"], collector_user, "Smith household", "12 High St")


def _answer_for(record: dict, question_id: int) -> dict:
    return next(a for a in record["answers"] if a["question_id"] == question_id)


def test_create_record_requires_locked_survey_and_grant(admin, collector_user, survey) -> None:
    with pytest.raises(Conflict) as exc:
        collector.create_record(survey["id"], collector_user, "A", "B")
    assert exc.value.code == "SURVEY_NOT_LOCKED"

    survey_lifecycle.lock_survey(survey["id"], admin)
    with pytest.raises(Forbidden) as exc:
        collector.create_record(survey["id"], collector_user, "A", "B")
    assert exc.value.code == "ACCESS_NOT_GRANTED"

    access_ledger.grant_access(survey["id"], collector_user.id, admin)
    with pytest.raises(ValidationError):
        collector.create_record(survey["id"], collector_user, "A", "  ")


def test_create_record_seeds_blank_answer_per_question(open_record, survey, collector_user) -> None:
    answers = open_record["answers"]
    assert [a["question_id"] for a in answers] == [survey["text_q"], survey["radio_q"], survey["check_q"]]
    assert all(a["text"] is None and a["radio"] is None and a["checkbox"] == [] for a in answers)
    assert open_record["created_by"] == collector_user.id
    assert open_record["submitted_at"] is None
    assert events.get_buffered_events()[-1]["type"] == events.RECORD_CREATED


def test_submit_requires_text_and_radio_but_not_checkbox(open_record, survey, collector_user) -> None:
    rid = open_record["id"]
    text_answer = _answer_for(open_record, survey["text_q"])
    radio_answer = _answer_for(open_record, survey["radio_q"])

    collector.update_answer(rid, radio_answer["id"], collector_user, {"radio": survey["owned"]})
    with pytest.raises(ValidationError) as exc:
        collector.submit(rid, collector_user)
    assert exc.value.code == "ANSWERS_INCOMPLETE"

    updated = collector.update_answer(rid, text_answer["id"], collector_user, {"text": "J. Smith"})
    assert updated["text"] == "J. Smith"
    submitted = collector.submit(rid, collector_user)
    assert submitted["submitted_at"] is not None

    # Without sealing a second submit succeeds again
    assert collector.submit(rid, collector_user)["submitted_at"] is not None


def test_sealed_records_reject_resubmit_and_edits(open_record, survey, collector_user) -> None:
    rid = open_record["id"]
    for question_key, fields in (("text_q", {"text": "J"}), ("radio_q", {"radio": survey["rented"]})):
        answer = _answer_for(open_record, survey[question_key])
        collector.update_answer(rid, answer["id"], collector_user, fields, seal_submitted=True)
    collector.submit(rid, collector_user, seal_submitted=True)

    with pytest.raises(Conflict) as exc:
        collector.submit(rid, collector_user, seal_submitted=True)
    assert exc.value.code == "RECORD_ALREADY_SUBMITTED"
    answer = _answer_for(open_record, survey["text_q"])
    with pytest.raises(Conflict):
        collector.update_answer(rid, answer["id"], collector_user, {"text": "K"}, seal_submitted=True)


def test_checkbox_answer_round_trips_and_options_are_validated(open_record, survey, collector_user) -> None:
    rid = open_record["id"]
    answer = _answer_for(open_record, survey["check_q"])
    saved = collector.update_answer(rid, answer["id"], collector_user, {"checkbox": [survey["cat"]]})
    assert saved["checkbox"] == [survey["cat"]]

    with pytest.raises(ValidationError) as exc:
        collector.update_answer(rid, answer["id"], collector_user, {"checkbox": [survey["owned"]]})
    assert exc.value.code == "ANSWER_OPTION_INVALID"


def test_update_answer_checks_question_and_owner(open_record, survey, collector_user, other_user, admin) -> None:
    rid = open_record["id"]
    answer = _answer_for(open_record, survey["text_q"])
    with pytest.raises(NotFound) as exc:
        collector.update_answer(rid, answer["id"], collector_user, {"text": "x"}, question_id=survey["radio_q"])
    assert exc.value.code == "ANSWER_NOT_FOUND"

    access_ledger.grant_access(survey["id"], other_user.id, admin)
    with pytest.raises(Forbidden) as exc:
        collector.update_answer(rid, answer["id"], other_user, {"text": "x"})
    assert exc.value.code == "RECORD_NOT_OWNED"


def test_revoked_grant_blocks_further_writes(open_record, survey, collector_user, admin) -> None:
    access_ledger.revoke_access(survey["id"], collector_user.id, admin)
    answer = _answer_for(open_record, survey["text_q"])
    with pytest.raises(Forbidden):
        collector.update_answer(open_record["id"], answer["id"], collector_user, {"text": "x"})


def test_revoked_grant_blocks_reading_own_record(open_record, survey, collector_user, admin) -> None:
    rid = open_record["id"]
    access_ledger.revoke_access(survey["id"], collector_user.id, admin)
    for read in (collector.get_record, collector.list_answers):
        with pytest.raises(Forbidden) as exc:
            read(rid, collector_user)
        assert exc.value.code == "ACCESS_NOT_GRANTED"

    # Admins read without holding a grant
    assert collector.get_record(rid, admin)["id"] == rid
    assert len(collector.list_answers(rid, admin)) == 3


def test_record_reads_and_delete(open_record, survey, collector_user, other_user, admin) -> None:
    rid = open_record["id"]
    assert [r["id"] for r in collector.list_records(survey["id"], admin)] == [rid]
    assert [r["id"] for r in collector.list_records(survey["id"], collector_user)] == [rid]
    access_ledger.grant_access(survey["id"], other_user.id, admin)
    assert collector.list_records(survey["id"], other_user) == []
    with pytest.raises(Forbidden):
        collector.get_record(rid, other_user)

    assert len(collector.list_answers(rid, admin)) == 3
    collector.delete_record(rid, collector_user)
    with pytest.raises(NotFound) as exc:
        collector.get_record(rid, admin)
    assert exc.value.code == "RECORD_NOT_FOUND"


def test_grant_to_unknown_user_is_not_found(admin, survey) -> None:
    with pytest.raises(NotFound) as exc:
        access_ledger.grant_access(survey["id"], 987654, admin)
    assert exc.value.code == "USER_NOT_FOUND"
