"""Request value sources.

The request is snapshotted once, before validation starts, so the
concurrently running rules only ever read plain mappings.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from starlette.datastructures import FormData, Headers, QueryParams
from starlette.requests import Request

from lindyhop.errors import bad_request
from lindyhop.validation import Source

READ_ONLY_METHODS = frozenset({"GET", "DELETE", "HEAD"})

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def default_source(method: str) -> Source:
    """Query string for read-only methods, body otherwise."""
    return Source.QUERY if method.upper() in READ_ONLY_METHODS else Source.BODY


def _from_multi(values: QueryParams | FormData | Headers, key: str) -> Any:
    found = values.getlist(key)
    if not found:
        return None
    return found[0] if len(found) == 1 else list(found)


@dataclass(slots=True)
class RequestValues:
    query: QueryParams
    headers: Headers
    path: dict[str, Any]
    body: dict[str, Any] | FormData = field(default_factory=dict)

    @classmethod
    async def load(cls, request: Request, *, read_body: bool = True) -> RequestValues:
        body: dict[str, Any] | FormData = {}
        if read_body:
            body = await cls._load_body(request)
        return cls(
            query=request.query_params,
            headers=request.headers,
            path=dict(request.path_params),
            body=body,
        )

    @staticmethod
    async def _load_body(request: Request) -> dict[str, Any] | FormData:
        content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type in FORM_TYPES:
            return await request.form()
        if content_type == "application/json" or content_type.endswith("+json"):
            raw = await request.body()
            if not raw.strip():
                return {}
            try:
                data = json.loads(raw)
            except ValueError:
                raise bad_request("Request body is not valid JSON") from None
            if not isinstance(data, dict):
                raise bad_request("Request body must be a JSON object")
            return data
        return {}

    def get(self, source: Source, key: str) -> Any:
        """Raw value for ``key`` in ``source``; None when absent."""
        match source:
            case Source.QUERY:
                return _from_multi(self.query, key)
            case Source.HEADER:
                return _from_multi(self.headers, key.lower())
            case Source.PATH:
                return self.path.get(key)
            case Source.BODY:
                if isinstance(self.body, FormData):
                    return _from_multi(self.body, key)
                return self.body.get(key)
        raise ValueError(f"Unresolved source {source!r}")
