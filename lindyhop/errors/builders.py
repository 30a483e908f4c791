"""Rejection Builders

One constructor per status class plus the field-level builders used by
rules. Builders return the Rejection; callers raise it or wrap it in Err.
"""
from typing import Any

from .types import ErrorKind, Rejection


# =============================================================================
# Status classes
# =============================================================================

def _reject(kind: ErrorKind, value: str | dict[str, Any], message: str | None) -> Rejection:
    if isinstance(value, str):
        if message is None:
            payload = {"error": kind.label, "message": value}
        else:
            payload = {"error": value, "message": message}
    else:
        payload = dict(value)
        payload.setdefault("error", kind.label)
        if message is not None:
            payload.setdefault("message", message)
    return Rejection(kind.http_status, payload)


def bad_request(value: str | dict[str, Any], message: str | None = None) -> Rejection:
    """400. ``bad_request("oops")`` or ``bad_request("Label", "oops")`` or a dict."""
    return _reject(ErrorKind.BAD_REQUEST, value, message)


def forbidden(value: str | dict[str, Any], message: str | None = None) -> Rejection:
    """403."""
    return _reject(ErrorKind.FORBIDDEN, value, message)


def not_found(value: str | dict[str, Any], message: str | None = None) -> Rejection:
    """404."""
    return _reject(ErrorKind.NOT_FOUND, value, message)


def internal_error(value: str | dict[str, Any], message: str | None = None) -> Rejection:
    """500."""
    return _reject(ErrorKind.INTERNAL_ERROR, value, message)


# =============================================================================
# Field level (collected during validation)
# =============================================================================

def field_error(kind: ErrorKind, field: str, message: str, **extra) -> Rejection:
    return Rejection(kind.http_status, {"error": kind.label, "field": field, "message": message, **extra})


def field_missing(field: str) -> Rejection:
    return field_error(ErrorKind.FIELD_MISSING, field, f"'{field}' is mandatory")


def type_mismatch(field: str, message: str, **extra) -> Rejection:
    return field_error(ErrorKind.TYPE_MISMATCH, field, message, **extra)


def constraint_violation(field: str, message: str, **extra) -> Rejection:
    return field_error(ErrorKind.CONSTRAINT_VIOLATION, field, message, **extra)


def validation_failed(errors: list[dict[str, Any]]) -> Rejection:
    """Aggregate of every field error collected for one request."""
    count = len(errors)
    noun = "error" if count == 1 else "errors"
    return Rejection(ErrorKind.VALIDATION_ERROR.http_status, {
        "error": ErrorKind.VALIDATION_ERROR.label,
        "message": f"Validation failed: {count} {noun}",
        "errors": errors,
    })
