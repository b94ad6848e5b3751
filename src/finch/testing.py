"""Async test client for finch engines.

Drives the engine through its ASGI interface with an in-memory transport,
so tests exercise the same token decoding, dispatch, and response sending
as a real server.
"""

from __future__ import annotations

import json as json_module
from typing import Any

from finch._internal.asgi import Message
from finch._internal.invoke import invoke
from finch.app import Engine
from finch.http.forms import media_type
from finch.http.response import JSON_CONTENT_TYPE, Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for finch engines.

    Usage::

        async with TestClient(engine) as client:
            response = await client.get("/api/items?page=2", token=token)
            assert response.status == 200
            assert response.json()["success"] is True

    ``token`` is sent as ``<token_scheme> <token>`` in the engine's
    configured token header.
    """

    __slots__ = ("engine",)

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def __aenter__(self) -> TestClient:
        self.engine.freeze()
        for hook in self.engine._startup_hooks:
            await invoke(hook)
        return self

    async def __aexit__(self, *args: object) -> None:
        for hook in self.engine._shutdown_hooks:
            await invoke(hook)

    async def get(self, path: str, **kwargs: Any) -> Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Response:
        return await self.request("DELETE", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        json: Any = None,
        token: str | None = None,
    ) -> Response:
        """Send one request and collect the response the engine sends back."""
        path, _, query_string = path.partition("?")
        sent_headers: dict[str, str] = {}
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            sent_headers["content-type"] = "application/json"
        if token is not None:
            config = self.engine.config
            sent_headers[config.token_header] = f"{config.token_scheme} {token}"
        sent_headers.update(headers or {})
        if body:
            sent_headers["content-length"] = str(len(body))

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path,
            "query_string": query_string.encode("latin-1"),
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in sent_headers.items()
            ],
            "client": ("127.0.0.1", 0),
        }
        transport = _Transport(body)
        await self.engine(scope, transport.receive, transport.send)
        return transport.response()


class _Transport:
    """In-memory ASGI receive/send pair for one request."""

    def __init__(self, body: bytes) -> None:
        self._pending: list[Message] = [{"type": "http.request", "body": body, "more_body": False}]
        self.status = 500
        self.headers: list[tuple[str, str]] = []
        self.chunks: list[bytes] = []

    async def receive(self) -> Message:
        return self._pending.pop(0) if self._pending else {"type": "http.disconnect"}

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = [
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in message.get("headers", [])
            ]
        elif message["type"] == "http.response.body":
            self.chunks.append(message.get("body", b""))

    def response(self) -> Response:
        content_type = JSON_CONTENT_TYPE
        extra: list[tuple[str, str]] = []
        for name, value in self.headers:
            if name == "content-type":
                content_type = value
            elif name != "content-length":
                extra.append((name, value))
        return Response(
            body=b"".join(self.chunks),
            status=self.status,
            content_type=content_type,
            headers=tuple(extra),
        )


def is_json(response: Response) -> bool:
    """Whether *response* declares a JSON content type."""
    return media_type(response.content_type) == "application/json"
