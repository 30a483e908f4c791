"""Tests for the validator, middleware and output registries."""

from __future__ import annotations

import pytest

from lindyhop.errors import ConfigurationError
from lindyhop.middlewares import MiddlewareRegistry
from lindyhop.outputs import OutputRegistry, default_outputs, json_output
from lindyhop.validation import (
    NumberRule,
    Rule,
    StringRule,
    ValidatorRegistry,
    ValidatorSet,
    default_validators,
)


class ShoutRule(StringRule):
    def validate(self, value):
        return value.upper() + "!"


def test_default_validators():
    registry = default_validators()
    assert set(registry.names()) == {"string", "number", "boolean"}
    assert "number" in registry
    assert registry.get("number") is NumberRule


def test_unknown_validator_lookup():
    with pytest.raises(KeyError):
        ValidatorRegistry().get("object")


def test_validator_set_declares_in_order():
    validate = ValidatorSet(default_validators())
    first = validate.string("type", "The type")
    second = validate.number("bar")
    assert validate.rules == [first, second]
    assert len(validate) == 2
    assert isinstance(first, StringRule) and first.field == "type" and first.description == "The type"
    assert isinstance(second, NumberRule) and second.description is None


def test_validator_set_unknown_type():
    validate = ValidatorSet(default_validators())
    with pytest.raises(AttributeError):
        validate.object("userId")
    with pytest.raises(ConfigurationError):
        validate.declare("object", "userId")


def test_registered_type_becomes_a_method():
    registry = default_validators()
    registry.register("shout", ShoutRule)
    rule = ValidatorSet(registry).shout("word")
    assert isinstance(rule, ShoutRule)


def test_replacement_only_affects_later_declarations():
    registry = default_validators()
    validate = ValidatorSet(registry)
    before = validate.string("a")
    registry.register("string", ShoutRule)
    after = validate.string("b")
    assert type(before) is StringRule
    assert type(after) is ShoutRule


@pytest.mark.parametrize("name", ["rules", "declare", "_private", "not-an-identifier"])
def test_reserved_or_invalid_type_names(name):
    with pytest.raises(ConfigurationError):
        ValidatorRegistry().register(name, StringRule)


def test_factory_must_produce_rule():
    registry = ValidatorRegistry()
    registry.register("broken", lambda field, description: object())
    with pytest.raises(ConfigurationError):
        ValidatorSet(registry).broken("x")


def test_frozen_set_rejects_new_rules():
    validate = ValidatorSet(default_validators())
    rule = validate.string("a")
    validate.freeze()
    assert rule.frozen
    with pytest.raises(ConfigurationError):
        validate.string("b")


def test_middleware_registry_replace():
    registry = MiddlewareRegistry()

    def first(request, reply, options, params):
        pass

    def second(request, reply, options, params):
        pass

    registry.register("auth", first)
    registry.register("auth", second)
    assert registry.get("auth") is second
    assert registry.get("missing") is None
    assert registry.names() == ["auth"]


def test_middleware_must_be_callable():
    with pytest.raises(ConfigurationError):
        MiddlewareRegistry().register("auth", "not a function")


def test_default_outputs():
    outputs = default_outputs()
    assert outputs.get("json").mime_type == "application/json"
    assert outputs.get("html").mime_type == "text/html"
    assert outputs.get("yaml").mime_type == "application/x-yaml"
    assert outputs.get("xml") is None


def test_output_registry_replace():
    outputs = OutputRegistry()
    outputs.register("json", "application/json", json_output)
    outputs.register("json", "application/vnd.api+json", json_output)
    assert outputs.get("json").mime_type == "application/vnd.api+json"
    assert "json" in outputs


def test_rule_is_abstract():
    with pytest.raises(TypeError):
        Rule("x")
