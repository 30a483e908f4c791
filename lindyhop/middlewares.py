"""Named middleware registry.

A middleware is a pre-validation step attached to routes by name:

    async def paginate(request, reply, options, params):
        params["limit"] = int(request.query_params.get("limit", options.get("limit", 20)))

    hop.register_middleware("paginate", paginate)
    router.get("/items").middleware("paginate", {"limit": 50}).run(list_items)

Steps may be sync or async. They reject by raising a Rejection or returning
``Err(...)``. Routes resolve names when a request arrives, so a replacement
registered later applies to routes that are already running.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable

from starlette.requests import Request

from lindyhop.errors import ConfigurationError
from lindyhop.logging import registry_logger
from lindyhop.reply import Reply

log = registry_logger()

MiddlewareFn = Callable[[Request, Reply, dict[str, Any], dict[str, Any]], "Awaitable[Any] | Any"]


class MiddlewareRegistry:
    def __init__(self) -> None:
        self._steps: dict[str, MiddlewareFn] = {}

    def register(self, name: str, step: MiddlewareFn) -> None:
        if not callable(step):
            raise ConfigurationError(f"Middleware '{name}' is not callable")
        if name in self._steps:
            log.info("middleware_replaced", name=name)
        self._steps[name] = step

    def get(self, name: str) -> MiddlewareFn | None:
        return self._steps.get(name)

    def names(self) -> list[str]:
        return list(self._steps)

    def __contains__(self, name: object) -> bool:
        return name in self._steps
