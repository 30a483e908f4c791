"""Rejections, Faults and the Result Monad

Usage:
    from lindyhop.errors import not_found, Err

    async def validate(self, value):
        user = await users.find(value)
        if user is None:
            return Err(not_found(f"{self.field} not found"))
        return user

    # or, equivalently
    raise not_found("user not found")
"""
from .types import (
    ErrorKind,
    Rejection,
    ConfigurationError,
    FailedResult,
    Result,
    Ok,
    Err,
    collect_results,
    unwrap_or_raise,
)

from .builders import (
    bad_request,
    forbidden,
    not_found,
    internal_error,
    field_error,
    field_missing,
    type_mismatch,
    constraint_violation,
    validation_failed,
)

from .handlers import normalize_failure, fallback_response

__all__ = [
    "ErrorKind",
    "Rejection",
    "ConfigurationError",
    "FailedResult",
    "Result",
    "Ok",
    "Err",
    "collect_results",
    "unwrap_or_raise",
    # Status classes
    "bad_request",
    "forbidden",
    "not_found",
    "internal_error",
    # Field level
    "field_error",
    "field_missing",
    "type_mismatch",
    "constraint_violation",
    "validation_failed",
    # Error phase
    "normalize_failure",
    "fallback_response",
]
