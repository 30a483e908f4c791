"""Field Rules

A Rule is the validation/coercion contract for one request field plus the
metadata the pipeline and the documentation projector read: optionality,
default, rename, array handling and request location.

Rules are configured fluently while a route declares its params and are
frozen when the route is bound, after which they are read-only.

Features:
- Built-in ``string``, ``number`` and ``boolean`` rules
- ``validate`` may return a value, Ok/Err, or an awaitable of either
- Array rules validate every element independently
"""
from __future__ import annotations

import asyncio
import inspect
import math
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Self

from lindyhop.errors import (
    ConfigurationError,
    Err,
    ErrorKind,
    Ok,
    Rejection,
    Result,
    constraint_violation,
    field_error,
    type_mismatch,
)


class _Missing:
    """Sentinel for "no default configured" (None is a legal default)."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Source(str, Enum):
    """Request section a rule reads its raw value from."""
    AUTO = "auto"
    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    BODY = "body"

    @classmethod
    def parse(cls, location: str) -> Source:
        """Map a location name to a Source. ``formData`` is an alias of ``body``."""
        locations = {
            "query": cls.QUERY,
            "header": cls.HEADER,
            "path": cls.PATH,
            "body": cls.BODY,
            "formData": cls.BODY,
        }
        if location not in locations:
            raise ConfigurationError(
                f"Invalid parameter location '{location}'. Valid: {', '.join(locations)}"
            )
        return locations[location]


class Rule(ABC):
    """Base class for every field rule, built-in or extension.

    Subclasses implement ``validate(value)`` for one raw (scalar) value and
    set ``doc_type`` to the primitive type shown in the API document.
    """

    doc_type: ClassVar[str] = "string"

    def __init__(self, field: str, description: str | None = None):
        self.field = field
        self.description = description
        self.is_optional = False
        self.default_value: Any = MISSING
        self.rename_to: str | None = None
        self.is_array = False
        self.source = Source.AUTO
        self._frozen = False

    # -- fluent configuration -------------------------------------------------

    def _configure(self, **changes: Any) -> Self:
        if self._frozen:
            raise ConfigurationError(
                f"Rule for '{self.field}' is frozen; configure it inside params()"
            )
        for name, value in changes.items():
            setattr(self, name, value)
        return self

    def optional(self) -> Self:
        return self._configure(is_optional=True)

    def default(self, value: Any) -> Self:
        """Value used when the field is absent. Only applies to optional rules."""
        return self._configure(default_value=value)

    def as_(self, name: str) -> Self:
        """Store the validated value under ``name`` instead of the field name."""
        return self._configure(rename_to=name)

    def array(self) -> Self:
        return self._configure(is_array=True)

    def in_(self, location: str) -> Self:
        """Read the raw value from ``query``, ``header``, ``path`` or ``body``/``formData``."""
        return self._configure(source=Source.parse(location))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def has_default(self) -> bool:
        return self.default_value is not MISSING

    @property
    def output_key(self) -> str:
        return self.rename_to or self.field

    # -- validation -----------------------------------------------------------

    @abstractmethod
    def validate(self, value: Any) -> Any:
        """Validate and coerce one raw value."""

    def validation_error(
        self, message: str, kind: ErrorKind = ErrorKind.CONSTRAINT_VIOLATION, **extra: Any
    ) -> Err[Rejection]:
        if kind is ErrorKind.CONSTRAINT_VIOLATION:
            return Err(constraint_violation(self.field, message, **extra))
        return Err(field_error(kind, self.field, message, **extra))

    def type_error(self, message: str, **extra: Any) -> Err[Rejection]:
        return Err(type_mismatch(self.field, message, **extra))

    async def check(self, raw: Any) -> Result[Any, Any]:
        """Run ``validate`` on a present raw value, element-wise for arrays.

        Rejections (raised or returned) come back as Err. Any other exception
        is a fault and propagates.
        """
        if not self.is_array:
            return await self._check_one(raw)

        items = list(raw) if isinstance(raw, (list, tuple)) else [raw]
        results = await asyncio.gather(*(self._check_one(item) for item in items))
        values = []
        for result in results:
            match result:
                case Ok(v):
                    values.append(v)
                case Err(_):
                    return result
        return Ok(values)

    async def _check_one(self, raw: Any) -> Result[Any, Any]:
        try:
            outcome = self.validate(raw)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Rejection as exc:
            return Err(exc)
        if isinstance(outcome, (Ok, Err)):
            return outcome
        return Ok(outcome)

    def doc_constraints(self) -> dict[str, Any]:
        """Extra schema keywords (``minimum``, ``enum`` ...) for the API document."""
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field!r})"


class StringRule(Rule):
    """String rule.

    Transforms run in a fixed order: trim, then the emptiness check, then
    case folding, then the remaining constraints.
    """

    doc_type = "string"

    def __init__(self, field: str, description: str | None = None):
        super().__init__(field, description)
        self.must_trim = False
        self.is_not_empty = False
        self.must_lower_case = False
        self.must_upper_case = False
        self.min_len: int | None = None
        self.max_len: int | None = None
        self.choices: tuple[str, ...] | None = None
        self.pattern: re.Pattern | None = None

    def trim(self) -> Self:
        return self._configure(must_trim=True)

    def not_empty(self) -> Self:
        return self._configure(is_not_empty=True)

    def lower_case(self) -> Self:
        return self._configure(must_lower_case=True)

    def upper_case(self) -> Self:
        return self._configure(must_upper_case=True)

    def min_length(self, length: int) -> Self:
        return self._configure(min_len=length)

    def max_length(self, length: int) -> Self:
        return self._configure(max_len=length)

    def one_of(self, *choices: str) -> Self:
        return self._configure(choices=tuple(choices))

    def matches(self, pattern: str) -> Self:
        return self._configure(pattern=re.compile(pattern))

    def validate(self, value: Any) -> Result[str, Rejection]:
        if not isinstance(value, str):
            return self.type_error(
                f"'{self.field}' must be a string. Received {type(value).__name__}"
            )
        if self.must_trim:
            value = value.strip()
        if self.is_not_empty and len(value) == 0:
            return self.validation_error(f"'{self.field}' must not be empty. Received '{value}'")
        if self.must_lower_case:
            value = value.lower()
        if self.must_upper_case:
            value = value.upper()

        if self.min_len is not None and len(value) < self.min_len:
            return self.validation_error(
                f"'{self.field}' must be at least {self.min_len} characters. Received '{value}'"
            )
        if self.max_len is not None and len(value) > self.max_len:
            return self.validation_error(
                f"'{self.field}' must be at most {self.max_len} characters. Received '{value}'"
            )
        if self.choices is not None and value not in self.choices:
            return self.validation_error(
                f"'{self.field}' must be one of {', '.join(self.choices)}. Received '{value}'"
            )
        if self.pattern is not None and not self.pattern.fullmatch(value):
            return self.validation_error(
                f"'{self.field}' must match '{self.pattern.pattern}'. Received '{value}'"
            )
        return Ok(value)

    def doc_constraints(self) -> dict[str, Any]:
        constraints: dict[str, Any] = {}
        if self.choices is not None:
            constraints["enum"] = list(self.choices)
        if self.pattern is not None:
            constraints["pattern"] = self.pattern.pattern
        if self.min_len is not None:
            constraints["minLength"] = self.min_len
        elif self.is_not_empty:
            constraints["minLength"] = 1
        if self.max_len is not None:
            constraints["maxLength"] = self.max_len
        return constraints


def parse_number(value: Any) -> int | float | None:
    """Parse ints, floats and numeric strings. Returns None when not numeric.

    Only finite values count: "inf", "nan" and overflowing literals such as
    "1e400" are rejected, as are digit group separators ("1_000").
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


class NumberRule(Rule):
    """Numeric rule with inclusive bounds, checked only when configured."""

    doc_type = "number"

    def __init__(self, field: str, description: str | None = None):
        super().__init__(field, description)
        self.min_value: int | float | None = None
        self.max_value: int | float | None = None
        self.must_be_integer = False

    def min(self, value: int | float) -> Self:
        return self._configure(min_value=value)

    def max(self, value: int | float) -> Self:
        return self._configure(max_value=value)

    def integer(self) -> Self:
        return self._configure(must_be_integer=True)

    def validate(self, value: Any) -> Result[int | float, Rejection]:
        number = parse_number(value)
        if number is None:
            return self.type_error(
                f"'{self.field}' must be a number. Received '{value}'"
            )
        if self.must_be_integer:
            if isinstance(number, float) and not number.is_integer():
                return self.type_error(
                    f"'{self.field}' must be an integer. Received '{value}'"
                )
            number = int(number)
        if self.min_value is not None and number < self.min_value:
            return self.validation_error(
                f"'{self.field}' must be greater or equal to {self.min_value}. Received '{value}'"
            )
        if self.max_value is not None and number > self.max_value:
            return self.validation_error(
                f"'{self.field}' must be lower or equal to {self.max_value}. Received '{value}'"
            )
        return Ok(number)

    def doc_constraints(self) -> dict[str, Any]:
        constraints: dict[str, Any] = {}
        if self.must_be_integer:
            constraints["type"] = "integer"
        if self.min_value is not None:
            constraints["minimum"] = self.min_value
        if self.max_value is not None:
            constraints["maximum"] = self.max_value
        return constraints


class BooleanRule(Rule):
    doc_type = "boolean"

    TRUE_WORDS: ClassVar[frozenset[str]] = frozenset({"true", "1", "yes", "on"})
    FALSE_WORDS: ClassVar[frozenset[str]] = frozenset({"false", "0", "no", "off"})

    def validate(self, value: Any) -> Result[bool, Rejection]:
        if isinstance(value, bool):
            return Ok(value)
        if isinstance(value, int) and value in (0, 1):
            return Ok(bool(value))
        if isinstance(value, str):
            word = value.strip().lower()
            if word in self.TRUE_WORDS:
                return Ok(True)
            if word in self.FALSE_WORDS:
                return Ok(False)
        return self.type_error(
            f"'{self.field}' must be a boolean. Received '{value}'"
        )


# Alias kept for extension authors: subclass it and implement ``validate``.
AbstractValidator = Rule
