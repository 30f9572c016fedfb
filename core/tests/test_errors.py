import logging

import pytest
from django.db import IntegrityError, OperationalError
from django.http import Http404
from rest_framework import exceptions

from core.errors import QuizAppError, classify_exception, error_message, fetch_or_empty


@pytest.mark.parametrize("code,message", [
    ("auth/wrong-password", "Incorrect password. Please try again."),
    ("db/not-found", "The requested resource was not found."),
    ("something/else", "An unexpected error occurred. Please try again."),
])
def test_error_message_lookup(code, message):
    assert error_message(code) == message


def test_app_errors_keep_their_code_and_message():
    error = classify_exception(QuizAppError("db/already-exists", "You have already submitted this quiz."))

    assert error.as_dict() == {"code": "db/already-exists", "message": "You have already submitted this quiz.", "detail": None}
    assert error.status_code == 409


@pytest.mark.parametrize("exc,code,status_code", [
    (exceptions.ValidationError({"title": ["blank"]}), "db/invalid-argument", 400),
    (Http404(), "db/not-found", 404),
    (exceptions.PermissionDenied(), "db/permission-denied", 403),
    (exceptions.NotAuthenticated(), "db/unauthenticated", 401),
    (exceptions.AuthenticationFailed(), "auth/invalid-token", 401),
    (exceptions.Throttled(wait=3), "auth/too-many-requests", 429),
    (exceptions.MethodNotAllowed("POST"), "request/method_not_allowed", 405),
    (IntegrityError("UNIQUE constraint failed"), "db/already-exists", 409),
    (OperationalError("database is locked"), "db/unavailable", 503),
])
def test_classify_exception(exc, code, status_code):
    error = classify_exception(exc)

    assert error.code == code
    assert error.status_code == status_code


def test_validation_errors_carry_field_detail():
    error = classify_exception(exceptions.ValidationError({"title": ["Quiz title cannot be empty."]}))

    assert error.detail == {"title": ["Quiz title cannot be empty."]}


def test_unknown_errors_hide_their_message_unless_debugging(settings):
    settings.DEBUG = False
    assert classify_exception(RuntimeError("secret internals")).message == "An unexpected error occurred. Please try again."

    settings.DEBUG = True
    error = classify_exception(RuntimeError("secret internals"))
    assert error.message == "secret internals"
    assert error.detail["type"] == "RuntimeError"


def test_fetch_or_empty_passes_results_through():
    warnings = []

    assert fetch_or_empty(lambda: iter([1, 2]), "numbers", warnings) == [1, 2]
    assert warnings == []


def test_fetch_or_empty_degrades_and_logs(caplog, monkeypatch):
    monkeypatch.setattr(logging.getLogger("core"), "propagate", True)
    warnings = []

    def broken():
        raise OperationalError("database is locked")

    with caplog.at_level(logging.ERROR, logger="core.errors"):
        assert fetch_or_empty(broken, "quizzes", warnings) == []

    assert warnings == ["Some data could not be loaded (quizzes). Please try again later."]
    assert "db/unavailable" in caplog.text
