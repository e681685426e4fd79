"""Functional tests for the logging configuration."""

from __future__ import annotations

import logging

from survey_api import logging_setup


def test_service_loggers_follow_requested_level() -> None:
    config = logging_setup.build_logging_config("debug")
    loggers = config["loggers"]
    assert loggers["survey_api"]["level"] == "DEBUG"
    assert loggers["survey_api.logic.events"]["level"] == "DEBUG"
    assert loggers["sqlalchemy.engine"]["level"] == "WARNING"
    assert config["root"]["handlers"] == ["console"]


def test_unknown_levels_fall_back_and_events_tune_separately() -> None:
    config = logging_setup.build_logging_config("chatty", event_level="warning", sql_echo=True)
    loggers = config["loggers"]
    assert loggers["survey_api"]["level"] == "INFO"
    assert loggers["survey_api.logic.events"]["level"] == "WARNING"
    assert loggers["sqlalchemy.engine"]["level"] == "INFO"


def test_configure_logging_reads_environment(monkeypatch, mocker) -> None:
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.setenv("SQL_ECHO", "1")
    mocker.patch.object(logging.getLogger(), "handlers", [])
    applied = mocker.patch.object(logging_setup, "dictConfig")

    logging_setup.configure_logging()

    config = applied.call_args.args[0]
    assert config["loggers"]["survey_api"]["level"] == "ERROR"
    assert config["loggers"]["sqlalchemy.engine"]["level"] == "INFO"


def test_configure_logging_keeps_existing_handlers(mocker) -> None:
    mocker.patch.object(logging.getLogger(), "handlers", [logging.NullHandler()])
    applied = mocker.patch.object(logging_setup, "dictConfig")
    logging_setup.configure_logging()
    applied.assert_not_called()
