"""Response handle shared by middlewares and outputs.

Starlette responses are immutable once built, so the pipeline accumulates
status, headers and body on a Reply and converts it at the end.
"""
from __future__ import annotations

from dataclasses import dataclass

from starlette.responses import RedirectResponse, Response


@dataclass(frozen=True, slots=True)
class Redirect:
    """Handler result that sends an HTTP redirect instead of a body."""
    url: str
    permanent: bool = False

    @property
    def status_code(self) -> int:
        return 301 if self.permanent else 302


class Reply:
    def __init__(self) -> None:
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.media_type: str | None = None
        self._chunks: list[bytes] = []
        self._redirect: Redirect | None = None

    def status(self, code: int) -> Reply:
        self.status_code = code
        return self

    def set_header(self, name: str, value: str) -> Reply:
        self.headers[name] = value
        return self

    def content_type(self, media_type: str) -> Reply:
        self.media_type = media_type
        return self

    def write(self, chunk: str | bytes) -> Reply:
        self._chunks.append(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
        return self

    def redirect(self, url: str, permanent: bool = False) -> Reply:
        self._redirect = Redirect(url, permanent)
        return self

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def to_response(self) -> Response:
        if self._redirect is not None:
            return RedirectResponse(
                self._redirect.url, status_code=self._redirect.status_code, headers=self.headers
            )
        return Response(
            content=self.body,
            status_code=self.status_code,
            headers=self.headers,
            media_type=self.media_type,
        )
