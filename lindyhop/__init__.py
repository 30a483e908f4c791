"""Declarative request pipeline for Starlette/FastAPI apps.

    from fastapi import FastAPI
    import lindyhop

    app = FastAPI()
    api = lindyhop.hop(app)
    users = api.router("/users")

    users.post("/foo", "This is what this endpoint does") \\
        .params(lambda validate: (
            validate.string("type", "The type of foo").optional().trim().lower_case(),
            validate.number("bar").min(0).max(100),
        )) \\
        .run(lambda params: params)
"""
from lindyhop.application import LindyHop, hop
from lindyhop.config import Settings, get_settings
from lindyhop.errors import (
    ConfigurationError,
    Err,
    ErrorKind,
    Ok,
    Rejection,
    bad_request,
    forbidden,
    internal_error,
    not_found,
)
from lindyhop.middlewares import MiddlewareRegistry
from lindyhop.outputs import OutputFormat, OutputRegistry
from lindyhop.reply import Redirect, Reply
from lindyhop.routing import Route, Router
from lindyhop.validation import (
    AbstractValidator,
    BooleanRule,
    NumberRule,
    Rule,
    Source,
    StringRule,
    ValidatorRegistry,
    ValidatorSet,
)

__all__ = [
    "LindyHop",
    "hop",
    "Router",
    "Route",
    "Settings",
    "get_settings",
    # Rules
    "Rule",
    "AbstractValidator",
    "StringRule",
    "NumberRule",
    "BooleanRule",
    "Source",
    "ValidatorRegistry",
    "ValidatorSet",
    # Registries
    "MiddlewareRegistry",
    "OutputRegistry",
    "OutputFormat",
    # Responses
    "Redirect",
    "Reply",
    # Errors
    "ErrorKind",
    "Rejection",
    "ConfigurationError",
    "Ok",
    "Err",
    "bad_request",
    "forbidden",
    "not_found",
    "internal_error",
]
