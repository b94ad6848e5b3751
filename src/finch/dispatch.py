"""Dispatcher — the per-request pipeline.

    match → authorize → bind → invoke → normalize

Each stage can end the request early with a structured error envelope:
404 when no route matches, 401/403 when authorization denies, 400 when
binding fails, 500 when the handler raises something unexpected. Handler
return values are wrapped in the success envelope unless they already are
a ``Response``.

Every response, success or error, carries the request id header.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from finch._internal.invoke import invoke
from finch.auth.claims import NO_CLAIMS, Claims, as_claims
from finch.auth.resolver import AuthorizationResolver
from finch.auth.validators import RequestMeta
from finch.binding.binder import ParameterBinder
from finch.config import EngineConfig
from finch.context import claims_var, request_id_var, request_var
from finch.envelope import error_response, success_response
from finch.errors import HandlerFault, HTTPError
from finch.http.request import Request
from finch.http.response import Response, Success
from finch.routing.route import CompiledRoute
from finch.routing.router import RouteTable

logger = logging.getLogger("finch.dispatch")


class Dispatcher:
    """Routes one request through the compiled table to its handler.

    Holds only read-only state (the frozen table, config, and stateless
    resolver/binder); safe to share across concurrent requests.
    """

    __slots__ = ("_binder", "_config", "_resolver", "_table")

    def __init__(
        self,
        table: RouteTable,
        config: EngineConfig | None = None,
        resolver: AuthorizationResolver | None = None,
        binder: ParameterBinder | None = None,
    ) -> None:
        self._table = table
        self._config = config or EngineConfig()
        self._resolver = resolver or AuthorizationResolver()
        self._binder = binder or ParameterBinder(self._config)

    @property
    def table(self) -> RouteTable:
        return self._table

    async def dispatch(
        self,
        request: Request,
        claims: Claims | Mapping[str, Any] | None = NO_CLAIMS,
    ) -> Response:
        """Produce the response for *request* on behalf of *claims*."""
        header = self._config.request_id_header
        request_id = request.headers.get(header) or uuid.uuid4().hex
        try:
            response = await self._handle(request, as_claims(claims), request_id)
        except HTTPError as exc:
            response = error_response(exc)
        logger.debug("%s %s -> %d [%s]", request.method, request.path, response.status, request_id)
        if response.header(header) is None:
            response = response.with_header(header, request_id)
        return response

    async def _handle(self, request: Request, claims: Claims, request_id: str) -> Response:
        match = self._table.match(request.method, request.path)
        route = match.route
        request = request.with_path_params(match.path_params)

        request_token = request_var.set(request)
        claims_token = claims_var.set(claims)
        id_token = request_id_var.set(request_id)
        try:
            meta = RequestMeta(
                method=request.method,
                path=request.path,
                headers=request.headers,
                query=request.query,
                path_params=match.path_params,
                request_id=request_id,
            )
            decision = await self._resolver.authorize(route.policy, claims, meta)
            if not decision.allowed:
                raise decision.to_error()

            bound = await self._binder.bind(
                route.params,
                request,
                path_params=match.path_params,
                context={"claims": claims, "request_id": request_id, "request": request},
            )
            if not bound.ok:
                logger.debug("Binding failed for %s: %s", route.identity, bound.validations)
                bound.raise_for_failures()

            result = await self._invoke(route, request, bound.arguments)
        finally:
            request_var.reset(request_token)
            claims_var.reset(claims_token)
            request_id_var.reset(id_token)

        return self._normalize(result, route)

    async def _invoke(self, route: CompiledRoute, request: Request, arguments: dict[str, Any]) -> Any:
        try:
            return await invoke(route.handler, **arguments)
        except HTTPError:
            raise
        except Exception as exc:
            if self._config.debug:
                logger.exception(
                    "Unhandled error in %s for %s %s (arguments: %s)",
                    route.identity,
                    request.method,
                    request.path,
                    ", ".join(sorted(arguments)),
                )
            else:
                logger.exception("Unhandled error in %s", route.identity)
            raise HandlerFault() from exc

    def _normalize(self, result: Any, route: CompiledRoute) -> Response:
        if isinstance(result, Response):
            return result
        try:
            if isinstance(result, Success):
                return success_response(result.data, result.status, result.headers)
            return success_response(result)
        except (TypeError, ValueError) as exc:
            logger.exception("Result of %s is not JSON serializable", route.identity)
            raise HandlerFault() from exc
