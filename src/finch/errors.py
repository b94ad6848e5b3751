"""Finch exception hierarchy.

Shared across the route builder, resolver, binder, and dispatcher so every
module raises and catches the same types.
"""

from dataclasses import dataclass, field


class FinchError(Exception):
    """Base for all finch-specific errors."""


class ConfigurationError(FinchError):
    """Raised when engine configuration or a declaration is invalid.

    Typically caught during ``Engine.freeze()`` at startup.
    """


class DuplicateRouteError(ConfigurationError):
    """Two declarations of one controller share a verb and path.

    Only raised when ``EngineConfig.strict_routes`` is enabled; otherwise
    the later declaration replaces the earlier one with a warning.
    """


@dataclass(frozen=True, slots=True)
class DeclarationAnomaly:
    """A declaration the route builder dropped or replaced.

    Anomalies never abort the build. They are logged and collected on
    ``RouteTable.anomalies`` for introspection.
    """

    controller: str
    method: str
    reason: str

    def __str__(self) -> str:
        return f"{self.controller}.{self.method or '?'}: {self.reason}"


@dataclass(frozen=True, slots=True)
class HTTPError(FinchError):
    """An error that maps directly to an HTTP status and error envelope.

    Raised by the router, resolver, binder, or handlers. The dispatcher
    catches these and renders ``{"success": false, "error": {...}}``.
    """

    status: int
    detail: str = ""
    code: str = "ERROR"
    headers: tuple[tuple[str, str], ...] = ()
    validations: dict[str, str] | None = field(default=None, compare=False)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request verb and path."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status=404, detail=detail, code="NOT_FOUND")


class AuthenticationRequired(HTTPError):  # noqa: N818
    """401 — the route is protected and no credential was presented."""

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status=401,
            detail=detail,
            code="UNAUTHORIZED",
            headers=(("WWW-Authenticate", "Bearer"),),
        )


class AuthorizationDenied(HTTPError):  # noqa: N818
    """403 — a credential was presented but the validator chain failed."""

    def __init__(self, detail: str = "Access denied") -> None:
        super().__init__(status=403, detail=detail, code="FORBIDDEN")


class BindingError(HTTPError):
    """400 — one or more parameters could not be extracted or coerced.

    ``validations`` maps each failing argument to its message.
    """

    def __init__(
        self,
        validations: dict[str, str],
        detail: str = "Invalid request parameters",
    ) -> None:
        super().__init__(
            status=400,
            detail=detail,
            code="VALIDATION_ERROR",
            validations=validations,
        )


class HandlerFault(HTTPError):
    """500 — an unexpected failure inside application logic.

    The detail is always generic; the original exception is only logged.
    """

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(status=500, detail=detail, code="INTERNAL_ERROR")


class DomainError(HTTPError):
    """An application-level error with its own status and code.

    Raise from a handler to produce a structured error envelope::

        raise DomainError(409, "EMAIL_TAKEN", "Email already registered",
                          validations={"email": "Already in use"})
    """

    def __init__(
        self,
        status: int,
        code: str,
        message: str,
        *,
        validations: dict[str, str] | None = None,
        headers: tuple[tuple[str, str], ...] = (),
    ) -> None:
        super().__init__(
            status=status,
            detail=message,
            code=code,
            headers=headers,
            validations=validations,
        )
