"""Compile declarations into a ``RouteTable``.

Runs once, when the engine freezes. Malformed declarations are dropped
with a warning rather than aborting startup; each drop is recorded as a
``DeclarationAnomaly`` on the resulting table.
"""

import logging

from finch.auth.policy import ControllerPolicy, EndpointPolicy, resolve_policy
from finch.config import EngineConfig
from finch.declarations import (
    ControllerDeclaration,
    DeclarationRegistry,
    EndpointDeclaration,
    ParamSource,
)
from finch.errors import ConfigurationError, DeclarationAnomaly, DuplicateRouteError
from finch.routing.handlers import HandlerTable
from finch.routing.route import CompiledRoute
from finch.routing.router import RouteTable, join_paths, parse_path, specificity

_log = logging.getLogger("finch.routing")

SUPPORTED_VERBS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


class _Dropped(Exception):  # noqa: N818
    """Internal signal: the declaration is unusable."""


class RouteTableBuilder:
    """Turns a ``DeclarationRegistry`` into an immutable ``RouteTable``."""

    __slots__ = ("_config", "_handlers")

    def __init__(self, handlers: HandlerTable, config: EngineConfig | None = None) -> None:
        self._handlers = handlers
        self._config = config or EngineConfig()

    def build(self, registry: DeclarationRegistry) -> RouteTable:
        anomalies: list[DeclarationAnomaly] = []
        routes: list[CompiledRoute] = []
        deny_unspecified = self._config.unspecified_policy == "deny"

        for group in registry.groups():
            # (verb, path) -> index into this controller's routes
            slots: dict[tuple[str, str], int] = {}
            controller_routes: list[CompiledRoute] = []
            for endpoint in group.endpoints:
                try:
                    route = self._compile(group.controller, endpoint, deny_unspecified)
                except _Dropped as exc:
                    anomaly = DeclarationAnomaly(endpoint.controller, endpoint.method or "", str(exc))
                    _log.warning("Dropping route declaration %s", anomaly)
                    anomalies.append(anomaly)
                    continue

                key = (route.verb, route.path)
                index = slots.get(key)
                if index is None:
                    slots[key] = len(controller_routes)
                    controller_routes.append(route)
                    continue

                replaced = controller_routes[index]
                if self._config.strict_routes:
                    msg = (
                        f"Duplicate route {route.verb} {route.path} in controller "
                        f"{group.controller.name!r}: {replaced.method} and {route.method}"
                    )
                    raise DuplicateRouteError(msg)
                anomaly = DeclarationAnomaly(
                    replaced.controller,
                    replaced.method,
                    f"{route.verb} {route.path} replaced by {route.identity}",
                )
                _log.warning("Duplicate route declaration %s", anomaly)
                anomalies.append(anomaly)
                controller_routes[index] = route

            routes.extend(controller_routes)

        _warn_shadowed(routes)
        table = RouteTable(routes, anomalies)
        _log.debug("Built route table: %d routes, %d anomalies", len(table), len(anomalies))
        return table

    def _compile(
        self,
        controller: ControllerDeclaration,
        endpoint: EndpointDeclaration,
        deny_unspecified: bool,
    ) -> CompiledRoute:
        if not endpoint.method:
            raise _Dropped("missing method name")
        if not endpoint.verb:
            raise _Dropped("missing HTTP verb")
        verb = endpoint.verb.upper()
        if verb not in SUPPORTED_VERBS:
            raise _Dropped(f"unsupported HTTP verb {endpoint.verb!r}")
        if endpoint.path is None:
            raise _Dropped("missing path")

        path = join_paths(controller.base_path, endpoint.path)
        try:
            segments = parse_path(path)
        except ConfigurationError as exc:
            raise _Dropped(str(exc)) from exc

        captures = {s.param_name for s in segments if s.is_param}
        for spec in endpoint.params:
            if spec.source is ParamSource.PATH and not spec.binds_all and spec.name not in captures:
                raise _Dropped(f"path parameter {spec.label!r} is not captured by {path!r}")

        handler = self._handlers.resolve(endpoint.controller, endpoint.method)
        if handler is None:
            raise _Dropped("no handler registered")

        auth = endpoint.auth
        if isinstance(auth, ControllerPolicy) and not isinstance(auth, EndpointPolicy):
            _log.warning(
                "%s declares a ControllerPolicy at endpoint level; treating it as an EndpointPolicy",
                endpoint.identity,
            )
            auth = EndpointPolicy(auth.validators, auth.require_all)

        return CompiledRoute(
            verb=verb,
            path=path,
            segments=tuple(segments),
            rank=specificity(segments),
            policy=resolve_policy(auth, controller.auth, deny_unspecified=deny_unspecified),
            params=endpoint.params,
            handler=handler,
            controller=endpoint.controller,
            method=endpoint.method,
        )


def _warn_shadowed(routes: list[CompiledRoute]) -> None:
    """Warn about identical (verb, path) pairs declared by different controllers."""
    first: dict[tuple[str, str], CompiledRoute] = {}
    for route in routes:
        key = (route.verb, route.path)
        winner = first.setdefault(key, route)
        if winner is not route:
            _log.warning(
                "Route %s %s of %s is shadowed by %s",
                route.verb,
                route.path,
                route.identity,
                winner.identity,
            )


def build_route_table(
    registry: DeclarationRegistry,
    handlers: HandlerTable,
    config: EngineConfig | None = None,
) -> RouteTable:
    """One-shot helper: ``RouteTableBuilder(handlers, config).build(registry)``."""
    return RouteTableBuilder(handlers, config).build(registry)
