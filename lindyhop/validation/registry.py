"""Validator Registry and Validator Sets

The registry maps a type name to a rule factory. A ValidatorSet exposes one
declaring method per registered type name, so ``validate.number("bar")``
builds a NumberRule, appends it and returns it for fluent configuration.
"""
from __future__ import annotations

from typing import Any, Callable, Iterator

from lindyhop.errors import ConfigurationError
from lindyhop.logging import registry_logger

from .rules import BooleanRule, NumberRule, Rule, StringRule

log = registry_logger()

RuleFactory = Callable[[str, "str | None"], Rule]


class ValidatorRegistry:
    """Type name -> rule factory (usually a Rule subclass).

    Registering an existing name replaces it. Lookup happens when a rule is
    declared, so only rules declared afterwards see the replacement.
    """

    def __init__(self) -> None:
        self._factories: dict[str, RuleFactory] = {}

    def register(self, type_name: str, factory: RuleFactory) -> None:
        if not type_name.isidentifier() or type_name.startswith("_"):
            raise ConfigurationError(f"Invalid validator type name '{type_name}'")
        if hasattr(ValidatorSet, type_name):
            raise ConfigurationError(f"Validator type name '{type_name}' is reserved")
        if not callable(factory):
            raise ConfigurationError(f"Validator for '{type_name}' is not callable")
        if type_name in self._factories:
            log.info("validator_replaced", type_name=type_name)
        self._factories[type_name] = factory

    def get(self, type_name: str) -> RuleFactory:
        if type_name not in self._factories:
            available = ", ".join(self._factories) or "none"
            raise KeyError(f"Validator type '{type_name}' not registered. Available: {available}")
        return self._factories[type_name]

    def names(self) -> list[str]:
        return list(self._factories)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._factories


def default_validators() -> ValidatorRegistry:
    registry = ValidatorRegistry()
    registry.register("string", StringRule)
    registry.register("number", NumberRule)
    registry.register("boolean", BooleanRule)
    return registry


class ValidatorSet:
    """Ordered rules of one route, in declaration order."""

    def __init__(self, registry: ValidatorRegistry):
        self._registry = registry
        self._rules: list[Rule] = []
        self._frozen = False

    def declare(self, type_name: str, field: str, description: str | None = None) -> Rule:
        try:
            factory = self._registry.get(type_name)
        except KeyError as exc:
            raise ConfigurationError(str(exc.args[0])) from None
        rule = factory(field, description)
        if not isinstance(rule, Rule):
            raise ConfigurationError(
                f"Validator '{type_name}' produced {type(rule).__name__}, expected a Rule"
            )
        return self.add(rule)

    def add(self, rule: Rule) -> Rule:
        if self._frozen:
            raise ConfigurationError("Cannot add rules to a route that is already running")
        self._rules.append(rule)
        return rule

    def __getattr__(self, type_name: str) -> Callable[..., Rule]:
        if type_name.startswith("_") or type_name not in self._registry:
            raise AttributeError(f"No validator registered for type '{type_name}'")

        def declare(field: str, description: str | None = None) -> Rule:
            return self.declare(type_name, field, description)

        return declare

    def freeze(self) -> None:
        self._frozen = True
        for rule in self._rules:
            rule.freeze()

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        fields: list[Any] = [rule.field for rule in self._rules]
        return f"ValidatorSet({fields!r})"
