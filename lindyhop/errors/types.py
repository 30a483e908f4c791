"""Rejection Types and Result Monad

Rejections are expected failures with a transport status code attached.
Anything else raised inside the pipeline is a fault. Validators, middlewares
and handlers can also *return* failures through the Result monad instead of
raising, which keeps lookups that routinely miss free of try/except noise.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Iterator, NoReturn, TypeVar, Union, final

T = TypeVar("T")
E = TypeVar("E")


class ErrorKind(Enum):
    """Error taxonomy.

    Field level kinds (FIELD_MISSING, TYPE_MISMATCH, CONSTRAINT_VIOLATION)
    are collected during validation and surface together inside a single
    VALIDATION_ERROR. The remaining kinds short-circuit the pipeline.
    """
    FIELD_MISSING = "FieldMissing"
    TYPE_MISMATCH = "TypeMismatch"
    CONSTRAINT_VIOLATION = "ConstraintViolation"
    VALIDATION_ERROR = "ValidationError"
    BAD_REQUEST = "BadRequest"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    INTERNAL_ERROR = "InternalError"

    @property
    def label(self) -> str:
        """Wire name used in the ``error`` key of payloads."""
        return self.value

    @property
    def http_status(self) -> int:
        if self is ErrorKind.FORBIDDEN:
            return 403
        if self is ErrorKind.NOT_FOUND:
            return 404
        if self is ErrorKind.INTERNAL_ERROR:
            return 500
        return 400

    @classmethod
    def from_label(cls, label: Any) -> ErrorKind | None:
        for kind in cls:
            if kind.value == label:
                return kind
        return None


class ConfigurationError(Exception):
    """Raised while routes are being declared, never at request time."""


class Rejection(Exception):
    """Tagged failure carrying a status code and a JSON-able payload.

    The status code is metadata for the transport and is not part of the
    payload sent to the client. The payload is normally a dict with
    ``error``/``message`` keys but plain values are carried unchanged.
    """

    def __init__(self, status_code: int, payload: Any):
        self.status_code = status_code
        self.payload = payload
        super().__init__(self.message or self._get("error") or f"HTTP {status_code}")

    def _get(self, key: str) -> Any:
        return self.payload.get(key) if isinstance(self.payload, dict) else None

    @property
    def kind(self) -> ErrorKind | None:
        return ErrorKind.from_label(self._get("error"))

    @property
    def field(self) -> str | None:
        return self._get("field")

    @property
    def message(self) -> str | None:
        return self._get("message")

    def to_dict(self) -> Any:
        return dict(self.payload) if isinstance(self.payload, dict) else self.payload

    def __repr__(self) -> str:
        return f"Rejection({self.status_code}, {self.payload!r})"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def __iter__(self) -> Iterator[T]:
        yield self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result.

    ``error`` is usually a Rejection, but any value is allowed: plain values
    pass through the error phase unchanged with status 500.
    """
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err: {self.error!r}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def __iter__(self) -> Iterator:
        return iter([])


Result = Union[Ok[T], Err[E]]


def collect_results(results: list[Result[T, E]]) -> Result[list[T], list[E]]:
    """Collect Results into one: Ok of all values, or Err of every error."""
    values: list[T] = []
    errors: list[E] = []

    for r in results:
        match r:
            case Ok(v):
                values.append(v)
            case Err(e):
                errors.append(e)

    if errors:
        return Err(errors)
    return Ok(values)


def unwrap_or_raise(value: Any) -> Any:
    """Convert a returned Result into exception flow.

    ``Ok`` unwraps, ``Err`` raises (a Rejection directly, anything else
    wrapped in ``FailedResult``), other values are returned unchanged.
    """
    match value:
        case Ok(v):
            return v
        case Err(e):
            if isinstance(e, BaseException):
                raise e
            raise FailedResult(e)
    return value


class FailedResult(Exception):
    """Carries a plain (non-exception) value returned through ``Err``."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(repr(value))
