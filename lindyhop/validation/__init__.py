"""Declarative Parameter Validation

Usage:
    route.params(lambda validate: (
        validate.string("type", "The type of foo").optional().trim().lower_case(),
        validate.number("bar").min(0).max(100),
    ))

Extension types subclass ``Rule`` (alias ``AbstractValidator``) and are
registered under a type name:

    class ObjectRule(Rule):
        def model(self, repo):
            return self._configure(repo=repo)

        async def validate(self, value):
            found = await self.repo.find_by_id(value)
            if found is None:
                return Err(not_found(f"{self.field} not found"))
            return found

    hop.register_validator("object", ObjectRule)
"""
from .rules import (
    MISSING,
    Source,
    Rule,
    AbstractValidator,
    StringRule,
    NumberRule,
    BooleanRule,
    parse_number,
)
from .registry import ValidatorRegistry, ValidatorSet, default_validators

__all__ = [
    "MISSING",
    "Source",
    "Rule",
    "AbstractValidator",
    "StringRule",
    "NumberRule",
    "BooleanRule",
    "parse_number",
    "ValidatorRegistry",
    "ValidatorSet",
    "default_validators",
]
