"""The finch Engine — declarations in, ASGI application out.

Collects controller and endpoint declarations plus their handlers during
setup, compiles them into a frozen route table exactly once, and then
serves requests either programmatically (``await engine.dispatch(...)``)
or as an ASGI 3 application.

Usage::

    engine = Engine(config=EngineConfig(decode_token=my_decoder))
    engine.controller("Items", "/api/items", auth=ControllerPolicy([RoleValidator("user")]))

    @engine.route("Items", "GET", "", params=[ParameterSpec.query("page", int, required=True)])
    async def list_items(page: int) -> list[dict]:
        ...
"""

import logging
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from finch._internal.asgi import Receive, Scope, Send
from finch._internal.invoke import invoke
from finch.auth.claims import Claims
from finch.auth.policy import ControllerPolicy, EndpointPolicy, Public
from finch.auth.resolver import AuthorizationResolver
from finch.auth.revocation import RevokedTokens
from finch.binding.binder import ParameterBinder
from finch.config import EngineConfig
from finch.declarations import (
    ControllerDeclaration,
    DeclarationRegistry,
    EndpointDeclaration,
    ParameterSpec,
)
from finch.dispatch import Dispatcher
from finch.errors import DeclarationAnomaly
from finch.http.request import Request
from finch.http.response import Response
from finch.routing.builder import RouteTableBuilder
from finch.routing.handlers import HandlerTable
from finch.routing.router import RouteTable
from finch.server.handler import handle_request

logger = logging.getLogger("finch.server")


class Engine:
    """Routing and authorization engine.

    Mutable during setup. ``freeze()`` (called implicitly by the first
    request or the ASGI lifespan startup) compiles the route table and
    rejects any further registration.
    """

    def __init__(
        self,
        registry: DeclarationRegistry | None = None,
        handlers: HandlerTable | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.registry = registry if registry is not None else DeclarationRegistry()
        self.handlers = handlers if handlers is not None else HandlerTable()
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._dispatcher: Dispatcher | None = None
        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._revoked = RevokedTokens()

    # -- Registration --

    def controller(
        self,
        name: str,
        base_path: str = "",
        auth: ControllerPolicy | None = None,
    ) -> ControllerDeclaration:
        """Declare a controller and the policy its endpoints inherit."""
        self._check_not_frozen()
        return self.registry.controller(name, base_path, auth)

    def add(
        self,
        declaration: EndpointDeclaration,
        handler: Callable[..., Any] | None = None,
    ) -> None:
        """Add a declaration, optionally registering its handler too."""
        self._check_not_frozen()
        if handler is not None:
            self.handlers.register(declaration.controller, declaration.method, handler)
        self.registry.add(declaration)

    def add_handlers(self, controller: str, handlers: Mapping[str, Callable[..., Any]]) -> None:
        """Register handlers for declarations added separately."""
        self._check_not_frozen()
        self.handlers.register_many(controller, handlers)

    def route(
        self,
        controller: str,
        verb: str,
        path: str,
        *,
        params: Iterable[ParameterSpec] = (),
        auth: Public | EndpointPolicy | None = None,
        method: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Declare an endpoint and register the decorated function as its handler.

        *method* defaults to the function name.
        """

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            declaration = EndpointDeclaration(
                controller=controller,
                method=method or fn.__name__,
                verb=verb,
                path=path,
                params=tuple(params),
                auth=auth,
            )
            self.add(declaration, fn)
            return fn

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run during ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run during ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Compilation --

    def freeze(self) -> RouteTable:
        """Compile the route table. Idempotent; returns the table."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher.table

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def table(self) -> RouteTable:
        """The compiled route table (freezes the engine)."""
        return self.freeze()

    @property
    def anomalies(self) -> Sequence[DeclarationAnomaly]:
        return self.table.anomalies

    # -- Token revocation --

    def revoke_token(self, token: str) -> None:
        """Reject *token* from now on, even if it still decodes.

        Allowed after freeze. Public routes keep answering a revoked
        caller as anonymous.
        """
        self._revoked.revoke(token)

    def unrevoke_token(self, token: str) -> bool:
        """Accept *token* again. Returns False if it was not revoked."""
        return self._revoked.unrevoke(token)

    def clear_revoked_tokens(self) -> None:
        self._revoked.clear()

    @property
    def revoked_token_count(self) -> int:
        return len(self._revoked)

    # -- Serving --

    async def dispatch(
        self,
        request: Request,
        claims: Claims | Mapping[str, Any] | None = None,
    ) -> Response:
        """Dispatch *request* on behalf of *claims* (``None`` means anonymous)."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return await self._dispatcher.dispatch(request, claims)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._dispatcher is not None

        if scope["type"] != "http":
            logger.debug("Ignoring unsupported ASGI scope type %r", scope["type"])
            return

        await handle_request(
            scope,
            receive,
            send,
            dispatcher=self._dispatcher,
            config=self.config,
            revoked=self._revoked,
        )

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the engine at startup so declaration anomalies surface in
        the logs before the first request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        await invoke(hook)
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the engine after it has been frozen."
            raise RuntimeError(msg)

    def _ensure_frozen(self) -> None:
        """Double-checked locking so concurrent first requests build once."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile declarations. MUST only be called while holding _freeze_lock."""
        table = RouteTableBuilder(self.handlers, self.config).build(self.registry)
        self.registry.freeze()
        self.handlers.freeze()
        self._dispatcher = Dispatcher(
            table,
            self.config,
            AuthorizationResolver(),
            ParameterBinder(self.config),
        )
        self._frozen = True
        if table.anomalies:
            logger.warning("Route table built with %d dropped declaration(s)", len(table.anomalies))
        logger.info("Engine frozen with %d route(s)", len(table))
