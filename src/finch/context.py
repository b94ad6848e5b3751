"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task.
- ``claims_var``: The caller's ``Claims`` (``NO_CLAIMS`` when anonymous).
- ``request_id_var``: The correlation id echoed on the response.

All three are set by the dispatcher once a route matched and reset after
the handler returns. Outside a request, ``get_request()`` raises
``LookupError``; the others return their empty defaults.

Thread safety:
    ``ContextVar`` is task-local under asyncio. No locks needed.
"""

from contextvars import ContextVar

from finch.auth.claims import NO_CLAIMS, Claims
from finch.http.request import Request

request_var: ContextVar[Request] = ContextVar("finch_request")
"""The current request. Set by the dispatcher before authorization."""

claims_var: ContextVar[Claims] = ContextVar("finch_claims", default=NO_CLAIMS)

request_id_var: ContextVar[str] = ContextVar("finch_request_id", default="")


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_claims() -> Claims:
    """Return the current caller's claims, ``NO_CLAIMS`` if none."""
    return claims_var.get()


def get_request_id() -> str:
    return request_id_var.get()
