"""Routers and Routes

A Route is declared fluently and bound to the underlying Starlette router
by ``run``. Each request then flows through:

    middlewares (sequential) -> rules (concurrent) -> error aggregation
    -> handler -> output (or redirect)

and any failure along the way is normalized and rendered through the same
output format.
"""
from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any, Callable, Protocol, Self

from starlette.requests import Request
from starlette.responses import Response

from lindyhop.docs import describe_route, describe_routes, dump
from lindyhop.errors import (
    ConfigurationError,
    Err,
    Ok,
    Rejection,
    fallback_response,
    field_missing,
    internal_error,
    normalize_failure,
    unwrap_or_raise,
    validation_failed,
)
from lindyhop.logging import bound_context, generate_correlation_id, pipeline_logger
from lindyhop.reply import Redirect, Reply
from lindyhop.sources import RequestValues, default_source
from lindyhop.validation import Rule, Source, ValidatorSet

if TYPE_CHECKING:
    from lindyhop.application import LindyHop

log = pipeline_logger()

Handler = Callable[[dict[str, Any]], Any]


class RouteTarget(Protocol):
    """What the transport must offer: register an endpoint for (method, path)."""

    def add_route(
        self, path: str, endpoint: Callable[..., Any], methods: list[str] | None = None, name: str | None = None
    ) -> None: ...


async def resolve(outcome: Any) -> Any:
    """Await if needed, then turn a returned Result into value-or-raise."""
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return unwrap_or_raise(outcome)


class Route:
    def __init__(self, hop: LindyHop, router: Router, method: str, path: str, description: str | None = None):
        self.hop = hop
        self.router = router
        self.method = method.upper()
        self.path = path
        self.description = description
        self.validator = ValidatorSet(hop.validators)
        self.handler: Handler | None = None
        self._middlewares: list[tuple[str, dict[str, Any]]] = []
        self._output: str | None = None
        self._output_options: dict[str, Any] = {}

    # -- declaration ----------------------------------------------------------

    def _ensure_configurable(self) -> None:
        if self.handler is not None:
            raise ConfigurationError(f"Route {self.method} {self.full_path} is already running")

    def middleware(self, name: str, options: dict[str, Any] | None = None) -> Self:
        self._ensure_configurable()
        self._middlewares.append((name, dict(options or {})))
        return self

    def middlewares(self, *names: str) -> Self:
        for name in names:
            self.middleware(name)
        return self

    def params(self, build: Callable[[ValidatorSet], Any]) -> Self:
        self._ensure_configurable()
        build(self.validator)
        return self

    def outputs(self, name: str, options: dict[str, Any] | None = None) -> Self:
        self._ensure_configurable()
        self._output = name
        self._output_options = dict(options or {})
        return self

    def run(self, handler: Handler) -> Self:
        """Freeze the configuration and bind the route to the transport."""
        self._ensure_configurable()
        if not callable(handler):
            raise ConfigurationError(f"Handler for {self.method} {self.full_path} is not callable")
        self.handler = handler
        self.validator.freeze()
        self.router.bind(self)
        return self

    @property
    def full_path(self) -> str:
        return self.router.join(self.path)

    @property
    def output_name(self) -> str:
        return self._output or self.hop.settings.DEFAULT_OUTPUT

    def describe(self) -> dict[str, Any]:
        return dump(describe_route(self))

    def source_for(self, rule: Rule) -> Source:
        return default_source(self.method) if rule.source is Source.AUTO else rule.source

    # -- request pipeline -----------------------------------------------------

    async def handle(self, request: Request) -> Response:
        """Starlette endpoint."""
        header = self.hop.settings.CORRELATION_HEADER
        correlation_id = request.headers.get(header) or generate_correlation_id()
        with bound_context(correlation_id=correlation_id, route=f"{self.method} {self.full_path}"):
            reply = Reply()
            try:
                result = await self._execute(request, reply)
                response = await self._send(request, reply, result)
            except Exception as exc:
                response = await self._send_error(request, reply, exc)
            log.debug("request_completed", status=response.status_code)
            return response

    async def _execute(self, request: Request, reply: Reply) -> Any:
        params: dict[str, Any] = {}
        await self._run_middlewares(request, reply, params)

        reads_body = any(self.source_for(rule) is Source.BODY for rule in self.validator)
        values = await RequestValues.load(request, read_body=reads_body)
        await self._validate(values, params)

        return await resolve(self.handler(params))

    async def _run_middlewares(self, request: Request, reply: Reply, params: dict[str, Any]) -> None:
        for name, options in self._middlewares:
            step = self.hop.middlewares.get(name)
            if step is None:
                raise internal_error({
                    "message": f"Middleware '{name}' is not registered",
                    "middleware": name,
                })
            await resolve(step(request, reply, options, params))

    async def _validate(self, values: RequestValues, params: dict[str, Any]) -> None:
        # Appended as each rule settles, so the order across fields is not fixed.
        errors: list[Any] = []

        async def evaluate(rule: Rule) -> None:
            raw = values.get(self.source_for(rule), rule.field)
            if raw is None:
                if not rule.is_optional:
                    errors.append(field_missing(rule.field).to_dict())
                elif rule.has_default:
                    params[rule.output_key] = rule.default_value
                return

            match await rule.check(raw):
                case Ok(value):
                    if value is not None:
                        params[rule.output_key] = value
                case Err(error):
                    errors.append(error.to_dict() if isinstance(error, Rejection) else error)

        outcomes = await asyncio.gather(
            *(evaluate(rule) for rule in self.validator), return_exceptions=True
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        if errors:
            raise validation_failed(errors)

    async def _send(self, request: Request, reply: Reply, result: Any) -> Response:
        if isinstance(result, Redirect):
            reply.redirect(result.url, result.permanent)
            return reply.to_response()

        output = self.hop.outputs.get(self.output_name)
        if output is None:
            raise internal_error(f"Output '{self.output_name}' is not registered")
        reply.content_type(output.mime_type)
        await resolve(output.serializer(request, reply, result, self._output_options))
        return reply.to_response()

    async def _send_error(self, request: Request, reply: Reply, failure: Exception) -> Response:
        rejection = normalize_failure(failure)
        log_method = log.warning if rejection.status_code < 500 else log.error
        log_method("pipeline_rejected", status=rejection.status_code, payload=rejection.payload)

        error_reply = Reply().status(rejection.status_code)
        error_reply.headers.update(reply.headers)

        output = self.hop.outputs.get(self.output_name)
        if output is None:
            return fallback_response(rejection)
        error_reply.content_type(output.mime_type)
        try:
            await resolve(output.serializer(request, error_reply, rejection.to_dict(), self._output_options))
        except Exception as exc:
            log.exception("error_output_failed", output=output.name, error=str(exc))
            return fallback_response(rejection)
        return error_reply.to_response()

    def __repr__(self) -> str:
        return f"Route({self.method} {self.full_path})"


class Router:
    """Groups routes under a path prefix."""

    def __init__(self, hop: LindyHop, target: RouteTarget, path: str = ""):
        self.hop = hop
        self.target = target
        self.path = path.rstrip("/")
        self.routes: list[Route] = []

    def get(self, path: str, description: str | None = None) -> Route:
        return self._method("GET", path, description)

    def post(self, path: str, description: str | None = None) -> Route:
        return self._method("POST", path, description)

    def put(self, path: str, description: str | None = None) -> Route:
        return self._method("PUT", path, description)

    def delete(self, path: str, description: str | None = None) -> Route:
        return self._method("DELETE", path, description)

    def patch(self, path: str, description: str | None = None) -> Route:
        return self._method("PATCH", path, description)

    def _method(self, method: str, path: str, description: str | None) -> Route:
        route = Route(self.hop, self, method, path, description)
        self.routes.append(route)
        return route

    def join(self, path: str) -> str:
        full = f"{self.path}/{path.lstrip('/')}"
        if len(full) > 1:
            full = full.rstrip("/")
        return full

    def bind(self, route: Route) -> None:
        self.target.add_route(
            route.full_path,
            route.handle,
            methods=[route.method],
            name=f"{route.method.lower()}:{route.full_path}",
        )
        log.debug("route_bound", method=route.method, path=route.full_path)

    def docs(self) -> dict[str, dict[str, Any]]:
        return {
            path: {method: dump(operation) for method, operation in operations.items()}
            for path, operations in describe_routes(self.routes).items()
        }

    def __repr__(self) -> str:
        return f"Router({self.path or '/'!r}, routes={len(self.routes)})"
