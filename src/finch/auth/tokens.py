"""Bearer credential helpers.

``extract_bearer`` pulls the raw token out of the Authorization header.
``jwt_token_decoder`` builds an ``EngineConfig.decode_token`` callback
that verifies signatures with PyJWT. ``decode_unverified`` reads a JWT
payload for development and tests.

.. warning::

    ``decode_unverified`` does **not** verify signatures. Production
    deployments must plug a verifying decoder into
    ``EngineConfig.decode_token``; the engine trusts whatever claims that
    callback returns.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError

from finch.config import TokenDecoder

_log = logging.getLogger("finch.security")

# PyJWT switches every claim check off along with the signature check.
_UNVERIFIED_OPTIONS = {
    "verify_signature": False,
    "verify_exp": True,
    "verify_nbf": True,
    "verify_iat": True,
}


def extract_bearer(
    headers: Mapping[str, str],
    header: str = "Authorization",
    scheme: str = "Bearer",
) -> str | None:
    """Return the token from ``<header>: <scheme> <token>``, or ``None``.

    A missing header, another scheme, or an empty token all yield ``None``.
    """
    value = headers.get(header.lower()) or headers.get(header)
    if value is None:
        return None

    prefix = f"{scheme} "
    if not value.startswith(prefix):
        return None

    token = value[len(prefix) :].strip()
    return token if token else None


def decode_unverified(token: str) -> dict[str, Any] | None:
    """Decode a JWT payload without checking its signature.

    Returns ``None`` when the token is malformed, its payload is not a
    JSON object, ``exp`` has passed, or ``nbf``/``iat`` lie in the future.
    """
    try:
        return jwt.decode(token, options=_UNVERIFIED_OPTIONS)
    except jwt.ExpiredSignatureError:
        _log.debug("JWT expired")
    except InvalidTokenError as exc:
        _log.debug("Invalid JWT: %s", exc)
    return None


def encode_unsigned(payload: Mapping[str, Any]) -> str:
    """Build an unsigned (``alg: none``) JWT around *payload*.

    The inverse of ``decode_unverified``, for fixtures and local tooling.
    """
    return jwt.encode(dict(payload), None, algorithm="none")


async def unverified_token_decoder(token: str) -> dict[str, Any] | None:
    """``EngineConfig.decode_token`` adapter around ``decode_unverified``.

    For development only; see the module warning.
    """
    return decode_unverified(token)


def jwt_token_decoder(
    key: str | bytes,
    *,
    algorithms: Sequence[str] = ("HS256",),
    audience: str | None = None,
    issuer: str | None = None,
    leeway: float = 0,
) -> TokenDecoder:
    """Build a ``decode_token`` callback that verifies signatures with PyJWT::

        config = EngineConfig(decode_token=jwt_token_decoder(settings.jwt_secret))

    Tokens with a bad signature, wrong audience or issuer, or an expired
    ``exp`` decode to ``None``.
    """
    allowed = list(algorithms)

    async def decode(token: str) -> dict[str, Any] | None:
        try:
            return jwt.decode(
                token,
                key,
                algorithms=allowed,
                audience=audience,
                issuer=issuer,
                leeway=leeway,
            )
        except jwt.ExpiredSignatureError:
            _log.debug("JWT expired")
        except InvalidTokenError as exc:
            _log.debug("JWT rejected: %s", exc)
        return None

    return decode
