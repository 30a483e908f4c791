"""API Documentation Projector

Builds a Swagger 2.0 document from the same Rule objects that validate
requests. Only static route configuration is read, so the document can be
rebuilt at any time without serving a request.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Iterable, Literal

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, Field

from lindyhop.config import Settings
from lindyhop.logging import docs_logger
from lindyhop.sources import default_source
from lindyhop.validation import Rule, Source

if TYPE_CHECKING:
    from lindyhop.routing import Route, Router

log = docs_logger()

DOC_LOCATIONS: dict[Source, str] = {
    Source.QUERY: "query",
    Source.HEADER: "header",
    Source.PATH: "path",
    Source.BODY: "formData",
}

# Starlette converters ("{id:int}") are not part of the documented path.
_CONVERTER = re.compile(r"\{(\w+):[^}]+\}")


class ParameterDoc(BaseModel):
    """One parameter descriptor. Extra schema keywords (enum, minimum...) are kept."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    location: Literal["query", "header", "path", "formData"] = Field(alias="in")
    description: str | None = None
    required: bool
    type: str
    items: dict[str, Any] | None = None
    collection_format: str | None = Field(default=None, alias="collectionFormat")


class OperationDoc(BaseModel):
    description: str | None = None
    parameters: list[ParameterDoc] = Field(default_factory=list)
    produces: list[str] = Field(default_factory=list)
    responses: dict[str, dict[str, str]] = Field(default_factory=dict)


class InfoDoc(BaseModel):
    title: str
    version: str


class ApiDocument(BaseModel):
    swagger: str = "2.0"
    info: InfoDoc
    base_path: str = Field(default="/", alias="basePath")
    paths: dict[str, dict[str, OperationDoc]] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


def document_path(path: str) -> str:
    return _CONVERTER.sub(r"{\1}", path)


def describe_rule(rule: Rule, method: str) -> ParameterDoc:
    source = default_source(method) if rule.source is Source.AUTO else rule.source
    location = DOC_LOCATIONS[source]

    constraints = rule.doc_constraints()
    doc_type = constraints.pop("type", rule.doc_type)

    data: dict[str, Any] = {
        "name": rule.field,
        "in": location,
        "description": rule.description,
        # Path parameters are always required in Swagger 2.0
        "required": (not rule.is_optional) or source is Source.PATH,
    }
    if rule.is_array:
        data["type"] = "array"
        data["items"] = {"type": doc_type, **constraints}
        if location in ("query", "formData"):
            data["collectionFormat"] = "multi"
    else:
        data["type"] = doc_type
        data.update(constraints)
    if rule.has_default:
        data["default"] = jsonable_encoder(rule.default_value)

    return ParameterDoc.model_validate(data)


def describe_route(route: Route) -> OperationDoc:
    output = route.hop.outputs.get(route.output_name)
    responses = {"200": {"description": "Success"}}
    if len(route.validator):
        responses["400"] = {"description": "Validation failed"}
    return OperationDoc(
        description=route.description,
        parameters=[describe_rule(rule, route.method) for rule in route.validator],
        produces=[output.mime_type] if output is not None else [],
        responses=responses,
    )


def describe_routes(routes: Iterable[Route]) -> dict[str, dict[str, OperationDoc]]:
    paths: dict[str, dict[str, OperationDoc]] = {}
    for route in routes:
        paths.setdefault(document_path(route.full_path), {})[route.method.lower()] = describe_route(route)
    return paths


def build_document(routers: Iterable[Router], settings: Settings) -> dict[str, Any]:
    """Full API document for every route of every router."""
    document = ApiDocument(
        info=InfoDoc(title=settings.DOCS_TITLE, version=settings.DOCS_VERSION),
        basePath=settings.DOCS_BASE_PATH,
    )
    for router in routers:
        for path, operations in describe_routes(router.routes).items():
            document.paths.setdefault(path, {}).update(operations)

    log.debug("docs_built", paths=len(document.paths))
    return dump(document)


def dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
