"""Immutable HTTP request.

Everything the router, resolver, and binder read is frozen at creation.
The body is the one lazy part: it is pulled from the transport on first
access and cached, so authorization never pays for a body it rejects.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from finch._internal.asgi import Message, Receive, Scope
from finch.http.headers import Headers
from finch.http.query import QueryParams

if TYPE_CHECKING:
    from finch.http.forms import FormData


def _single_body(body: bytes) -> Receive:
    """An ASGI receive callable that yields *body* once."""
    sent = False

    async def receive() -> Message:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return receive


@dataclass(frozen=True, slots=True)
class Request:
    """An incoming request as the dispatcher sees it.

    ``path_params`` is empty until a route matched; the dispatcher then
    swaps in the captures with ``with_path_params``.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    # Shared between copies made by with_path_params.
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """Declared body size, or ``None`` when absent or not a number."""
        value = self.headers.get("content-length")
        if value is None or not value.strip().isdigit():
            return None
        return int(value)

    async def body(self) -> bytes:
        """The full request body, read from the transport once."""
        cached = self._cache.get("body")
        if cached is not None:
            return cached

        chunks: list[bytes] = []
        while self._receive is not None:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        body = b"".join(chunks)
        self._cache["body"] = body
        return body

    async def json(self) -> Any:
        return json_module.loads(await self.body())

    async def form(self) -> FormData:
        """The body parsed as URL-encoded or multipart form data.

        Raises:
            ValueError: The content type is not a form encoding or the
                multipart payload is malformed.
        """
        if "form" not in self._cache:
            from finch.http.forms import parse_form_data

            content_type = self.content_type or "application/x-www-form-urlencoded"
            self._cache["form"] = parse_form_data(await self.body(), content_type)
        return self._cache["form"]

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        return replace(self, path_params=path_params, _cache=self._cache)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            client=tuple(client) if client else None,
            _receive=receive,
        )

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, str] | bytes | None = None,
        body: bytes = b"",
        json: Any = None,
    ) -> Request:
        """Create a Request without a transport.

        Used when dispatching programmatically and in tests::

            request = Request.build("GET", "/items", query={"page": "2"})
        """
        merged = dict(headers or {})
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            if not any(name.lower() == "content-type" for name in merged):
                merged["content-type"] = "application/json"
        if "?" in path and query is None:
            path, _, qs = path.partition("?")
            query = qs.encode("latin-1")
        if isinstance(query, bytes):
            query_params = QueryParams(query)
        else:
            query_params = QueryParams.from_mapping(query or {})
        return cls(
            method=method.upper(),
            path=path,
            headers=Headers.from_mapping(merged),
            query=query_params,
            _receive=_single_body(body),
        )
