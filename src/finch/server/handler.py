"""ASGI handler — translates ASGI scope/messages to finch types.

The only component that touches raw ASGI directly. Converts the scope to
a typed ``Request``, turns the bearer credential into ``Claims``, runs the
dispatcher, and sends the ``Response`` back through ASGI ``send()``.
"""

import logging
import uuid
from collections.abc import Mapping

from finch._internal.asgi import Receive, Scope, Send
from finch.auth.claims import NO_CLAIMS, Claims, as_claims
from finch.auth.revocation import RevokedTokens
from finch.auth.tokens import extract_bearer
from finch.config import EngineConfig
from finch.dispatch import Dispatcher
from finch.envelope import error_response
from finch.errors import HandlerFault
from finch.http.request import Request
from finch.security.audit import emit_security_event
from finch.server.sender import send_response

logger = logging.getLogger("finch.server")


async def resolve_claims(
    request: Request,
    config: EngineConfig,
    revoked: RevokedTokens | None = None,
) -> Claims:
    """Decode the caller's bearer token with ``config.decode_token``.

    No token, no decoder, a revoked token, or a token the decoder rejects
    all yield ``NO_CLAIMS``; protected routes then answer 401. A decoder
    result that is not a mapping counts as a rejection.
    """
    token = extract_bearer(request.headers, config.token_header, config.token_scheme)
    if token is None:
        return NO_CLAIMS
    if revoked is not None and token in revoked:
        emit_security_event("auth.token.revoked", meta=request)
        return NO_CLAIMS
    if config.decode_token is None:
        logger.debug("Bearer token ignored: no decode_token configured")
        return NO_CLAIMS

    try:
        payload = await config.decode_token(token)
    except Exception:
        logger.warning("Token decoder raised for %s %s", request.method, request.path, exc_info=True)
        payload = None

    if not isinstance(payload, Mapping):
        if payload is not None:
            logger.warning("Token decoder returned %s, expected a mapping", type(payload).__name__)
        emit_security_event("auth.token.invalid", meta=request)
        return NO_CLAIMS
    return as_claims(payload)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
    config: EngineConfig,
    revoked: RevokedTokens | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    try:
        claims = await resolve_claims(request, config, revoked)

        response = await dispatcher.dispatch(request, claims)
    except Exception:
        # The dispatcher renders expected failures itself.
        logger.exception("Internal error handling %s %s", request.method, request.path)
        request_id = request.headers.get(config.request_id_header) or uuid.uuid4().hex
        response = error_response(HandlerFault()).with_header(config.request_id_header, request_id)

    await send_response(response, send, method=request.method)
