"""Top-level object tying routers to the process-scoped registries."""
from __future__ import annotations

from typing import Any

from lindyhop.config import Settings, get_settings
from lindyhop.docs import build_document
from lindyhop.logging import configure_logging
from lindyhop.middlewares import MiddlewareFn, MiddlewareRegistry
from lindyhop.outputs import OutputRegistry, Serializer, default_outputs
from lindyhop.routing import Route, Router, RouteTarget
from lindyhop.validation import ValidatorRegistry, default_validators
from lindyhop.validation.registry import RuleFactory


class LindyHop:
    """Owns the validator, middleware and output registries and every router.

    Registries are meant to be filled before the app starts serving. They are
    plain dicts underneath: registering while requests are in flight is last
    writer wins.

    Usage:
        app = FastAPI()
        hop = LindyHop(app)
        users = hop.router("/users")
        users.get("/{user_id}", "Fetch a user") \\
            .params(lambda validate: validate.number("user_id").in_("path")) \\
            .run(get_user)
    """

    def __init__(
        self,
        app: Any,
        settings: Settings | None = None,
        *,
        validators: ValidatorRegistry | None = None,
        middlewares: MiddlewareRegistry | None = None,
        outputs: OutputRegistry | None = None,
    ):
        self.app = app
        self.settings = settings or get_settings()
        self.validators = validators or default_validators()
        self.middlewares = middlewares or MiddlewareRegistry()
        self.outputs = outputs or default_outputs()
        self.routers: list[Router] = []
        # FastAPI/Starlette apps expose their router; a bare Router is used directly.
        self.target: RouteTarget = getattr(app, "router", app)

    def router(self, path: str) -> Router:
        router = Router(self, self.target, path)
        self.routers.append(router)
        return router

    def register_validator(self, type_name: str, factory: RuleFactory) -> None:
        self.validators.register(type_name, factory)

    def register_middleware(self, name: str, step: MiddlewareFn) -> None:
        self.middlewares.register(name, step)

    def register_output(self, name: str, mime_type: str, serializer: Serializer) -> None:
        self.outputs.register(name, mime_type, serializer)

    def configure_logging(self) -> None:
        """Install structlog output using LOG_LEVEL and LOG_JSON from the settings."""
        configure_logging(self.settings.LOG_LEVEL, self.settings.LOG_JSON)

    def docs(self) -> dict[str, Any]:
        return build_document(self.routers, self.settings)

    def serve_docs(self, path: str = "/docs.json", output: str = "json") -> Route:
        """Expose the API document. The docs route itself is not documented."""
        router = Router(self, self.target)
        return router.get(path, "API documentation").outputs(output).run(lambda params: self.docs())


def hop(app: Any, settings: Settings | None = None) -> LindyHop:
    return LindyHop(app, settings)
