"""Finch — declarative REST routing and authorization.

Turns endpoint declarations (verb, path, parameter sources, access
policy) into a frozen route table, then serves each request through
match → authorize → bind → invoke with structured JSON envelopes.

Basic usage::

    from finch import Engine, ParameterSpec, Public

    engine = Engine()
    engine.controller("Items", "/api/items")

    @engine.route("Items", "GET", "/{id}", params=[ParameterSpec.path("id", int)])
    async def get_item(id: int) -> dict:
        return {"id": id}

    @engine.route("Items", "GET", "/health", auth=Public())
    def health() -> str:
        return "ok"
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ALL",
    "NO_CLAIMS",
    "AuthenticationRequired",
    "AuthorizationDenied",
    "BaseValidator",
    "BindingError",
    "Claims",
    "ConfigurationError",
    "ControllerPolicy",
    "DeclarationRegistry",
    "DomainError",
    "EndpointDeclaration",
    "EndpointPolicy",
    "Engine",
    "EngineConfig",
    "FinchError",
    "HTTPError",
    "NotFound",
    "ParamSource",
    "ParameterSpec",
    "Public",
    "Request",
    "Response",
    "Success",
    "ValidationOutcome",
    "get_claims",
    "get_request",
    "validator",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import finch`` fast while providing a clean top-level API.
    """
    if name == "Engine":
        from finch.app import Engine

        return Engine

    if name == "EngineConfig":
        from finch.config import EngineConfig

        return EngineConfig

    if name == "Request":
        from finch.http.request import Request

        return Request

    if name in ("Response", "Success"):
        from finch.http import response as _resp

        return getattr(_resp, name)

    if name in ("ALL", "DeclarationRegistry", "EndpointDeclaration", "ParamSource", "ParameterSpec"):
        from finch import declarations as _decl

        return getattr(_decl, name)

    if name in (
        "NO_CLAIMS",
        "BaseValidator",
        "Claims",
        "ControllerPolicy",
        "EndpointPolicy",
        "Public",
        "ValidationOutcome",
        "validator",
    ):
        from finch import auth as _auth

        return getattr(_auth, name)

    if name in ("get_claims", "get_request"):
        from finch import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "AuthenticationRequired",
        "AuthorizationDenied",
        "BindingError",
        "ConfigurationError",
        "DomainError",
        "FinchError",
        "HTTPError",
        "NotFound",
    ):
        from finch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
