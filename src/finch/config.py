"""Engine configuration.

EngineConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from finch.errors import ConfigurationError

type TokenDecoder = Callable[[str], Awaitable[Mapping[str, Any] | None]]

_UNSPECIFIED_MODES = ("authenticated", "deny")


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Engine configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = EngineConfig(strict_routes=True, unspecified_policy="deny")

    Attributes:
        unspecified_policy: What a route with no ``Public``, endpoint, or
            controller policy requires. ``"authenticated"`` allows any caller
            presenting claims; ``"deny"`` rejects every caller with 403.
        strict_routes: Raise ``DuplicateRouteError`` on a duplicate
            (verb, path) within one controller instead of replacing.
        request_id_header: Header echoed back (or generated) on every response.
        token_header: Header carrying the bearer credential.
        token_scheme: Expected scheme prefix of ``token_header``.
        decode_token: Async callback turning a raw token into claims. Returns
            ``None`` for tokens it cannot decode. Without it, ASGI requests
            never carry claims.
        debug: Log handler tracebacks at ERROR with request details. Error
            envelopes never include internal detail, debug or not.
        max_content_length: Request bodies larger than this fail binding.
    """

    # Authorization
    unspecified_policy: Literal["authenticated", "deny"] = "authenticated"

    # Route table
    strict_routes: bool = False

    # Request identity
    request_id_header: str = "X-Request-ID"

    # Credentials
    token_header: str = "Authorization"
    token_scheme: str = "Bearer"
    decode_token: TokenDecoder | None = None

    # Diagnostics
    debug: bool = False

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    def __post_init__(self) -> None:
        if self.unspecified_policy not in _UNSPECIFIED_MODES:
            msg = (
                f"unspecified_policy must be one of {', '.join(_UNSPECIFIED_MODES)}, "
                f"got {self.unspecified_policy!r}"
            )
            raise ConfigurationError(msg)
        if self.max_content_length <= 0:
            msg = "max_content_length must be positive."
            raise ConfigurationError(msg)
        if not self.request_id_header:
            msg = "request_id_header must not be empty."
            raise ConfigurationError(msg)
