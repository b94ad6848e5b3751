"""Response → ASGI ``http.response.start`` / ``http.response.body``."""

from finch._internal.asgi import Send
from finch.http.response import Response

# 1xx, 204, and 304 never carry a body.
_BODYLESS = frozenset({204, 304})


def _body_allowed(status: int) -> bool:
    return status >= 200 and status not in _BODYLESS


def encode_headers(response: Response, content_length: int) -> list[tuple[bytes, bytes]]:
    """Lower-cased ASGI header pairs, content type first."""
    pairs = [("content-type", response.content_type), *response.headers]
    pairs.append(("content-length", str(content_length)))
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response*. HEAD keeps the GET content-length but sends no body."""
    body = response.body_bytes if _body_allowed(response.status) else b""
    headers = encode_headers(response, len(body))
    await send({"type": "http.response.start", "status": response.status, "headers": headers})
    await send({"type": "http.response.body", "body": b"" if method == "HEAD" else body})
