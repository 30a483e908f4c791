"""Output formats.

An output format is a (content type, serializer) pair. The same format
renders a route's successful result and its errors, with the status code
already set on the reply when the serializer runs.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import yaml
from fastapi.encoders import jsonable_encoder
from jinja2 import Environment
from starlette.requests import Request

from lindyhop.errors import ConfigurationError
from lindyhop.logging import registry_logger
from lindyhop.reply import Reply

log = registry_logger()

Serializer = Callable[[Request, Reply, Any, dict[str, Any]], "Awaitable[None] | None"]


@dataclass(frozen=True, slots=True)
class OutputFormat:
    name: str
    mime_type: str
    serializer: Serializer


class OutputRegistry:
    def __init__(self) -> None:
        self._formats: dict[str, OutputFormat] = {}

    def register(self, name: str, mime_type: str, serializer: Serializer) -> None:
        if not callable(serializer):
            raise ConfigurationError(f"Output '{name}' serializer is not callable")
        if name in self._formats:
            log.info("output_replaced", name=name, mime_type=mime_type)
        self._formats[name] = OutputFormat(name, mime_type, serializer)

    def get(self, name: str) -> OutputFormat | None:
        return self._formats.get(name)

    def names(self) -> list[str]:
        return list(self._formats)

    def __contains__(self, name: object) -> bool:
        return name in self._formats


def json_output(request: Request, reply: Reply, data: Any, options: dict[str, Any]) -> None:
    reply.write(json.dumps(
        jsonable_encoder(data),
        ensure_ascii=False,
        allow_nan=False,
        indent=options.get("indent"),
        separators=None if options.get("indent") else (",", ":"),
    ))


def yaml_output(request: Request, reply: Reply, data: Any, options: dict[str, Any]) -> None:
    reply.write(yaml.safe_dump(jsonable_encoder(data), sort_keys=False, allow_unicode=True))


async def html_output(request: Request, reply: Reply, data: Any, options: dict[str, Any]) -> None:
    """Render a jinja2 template.

    Options:
        templates: jinja2 Environment owned by the application
        template: template name for successful responses

    Error responses render ``<status>.html`` (e.g. ``404.html``).
    """
    env: Environment | None = options.get("templates")
    if env is None:
        raise ConfigurationError("html output requires a 'templates' jinja2 Environment option")

    if reply.status_code >= 400:
        name = f"{reply.status_code}.html"
    else:
        name = options.get("template")
        if name is None:
            raise ConfigurationError("html output requires a 'template' option")

    context = dict(data) if isinstance(data, dict) else {"data": data}
    context.setdefault("request", request)

    template = env.get_template(name)
    if env.is_async:
        reply.write(await template.render_async(**context))
    else:
        reply.write(template.render(**context))


def default_outputs() -> OutputRegistry:
    registry = OutputRegistry()
    registry.register("json", "application/json", json_output)
    registry.register("html", "text/html", html_output)
    registry.register("yaml", "application/x-yaml", yaml_output)
    return registry
