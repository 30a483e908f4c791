"""Tests for rejection builders, the Result helpers and failure normalization."""

from __future__ import annotations

import pytest

from lindyhop.errors import (
    Err,
    ErrorKind,
    FailedResult,
    Ok,
    Rejection,
    bad_request,
    collect_results,
    constraint_violation,
    field_missing,
    forbidden,
    internal_error,
    normalize_failure,
    not_found,
    unwrap_or_raise,
    validation_failed,
)


@pytest.mark.parametrize("builder, status, label", [
    (bad_request, 400, "BadRequest"),
    (forbidden, 403, "Forbidden"),
    (not_found, 404, "NotFound"),
    (internal_error, 500, "InternalError"),
])
def test_string_message_is_labelled_by_status(builder, status, label):
    rejection = builder("something happened")
    assert rejection.status_code == status
    assert rejection.payload == {"error": label, "message": "something happened"}
    assert "status" not in rejection.payload


def test_label_and_message():
    rejection = not_found("UserNotFound", "No user 7")
    assert rejection.payload == {"error": "UserNotFound", "message": "No user 7"}
    assert rejection.status_code == 404


def test_structured_payload():
    rejection = forbidden({"reason": "quota", "message": "Too many calls"})
    assert rejection.payload == {"reason": "quota", "message": "Too many calls", "error": "Forbidden"}
    assert rejection.kind is ErrorKind.FORBIDDEN
    assert rejection.message == "Too many calls"


def test_field_builders():
    missing = field_missing("name")
    assert missing.payload == {"error": "FieldMissing", "field": "name", "message": "'name' is mandatory"}
    assert missing.field == "name"

    violation = constraint_violation("age", "too old", limit=120)
    assert violation.kind is ErrorKind.CONSTRAINT_VIOLATION
    assert violation.payload["limit"] == 120


def test_validation_failed_aggregate():
    errors = [field_missing("a").to_dict(), field_missing("b").to_dict()]
    rejection = validation_failed(errors)
    assert rejection.status_code == 400
    assert rejection.payload["error"] == "ValidationError"
    assert rejection.payload["errors"] == errors
    assert rejection.payload["message"] == "Validation failed: 2 errors"


@pytest.mark.parametrize("kind, status", [
    (ErrorKind.FIELD_MISSING, 400),
    (ErrorKind.TYPE_MISMATCH, 400),
    (ErrorKind.CONSTRAINT_VIOLATION, 400),
    (ErrorKind.NOT_FOUND, 404),
    (ErrorKind.FORBIDDEN, 403),
    (ErrorKind.INTERNAL_ERROR, 500),
])
def test_taxonomy_status(kind, status):
    assert kind.http_status == status


def test_normalize_rejection_is_unchanged():
    rejection = not_found("gone")
    assert normalize_failure(rejection) is rejection


def test_normalize_fault_becomes_internal_error():
    rejection = normalize_failure(KeyError("secret_column"))
    assert rejection.status_code == 500
    assert rejection.payload == {"error": "InternalError", "message": "'secret_column'"}


def test_normalize_plain_value_passes_through():
    rejection = normalize_failure(FailedResult(["a", "b"]))
    assert rejection.status_code == 500
    assert rejection.payload == ["a", "b"]
    assert rejection.kind is None


def test_unwrap_or_raise():
    assert unwrap_or_raise(Ok(3)) == 3
    assert unwrap_or_raise("plain") == "plain"
    with pytest.raises(Rejection):
        unwrap_or_raise(Err(bad_request("no")))
    with pytest.raises(FailedResult):
        unwrap_or_raise(Err("nope"))


def test_collect_results():
    assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])
    assert collect_results([Ok(1), Err("x"), Err("y")]) == Err(["x", "y"])
