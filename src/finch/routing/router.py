"""Path templates and the compiled route table.

Templates are literal segments plus ``{name}`` captures. The table is an
ordered tuple: every literal-only route (rank 0) before any route with a
capture (rank 1), declaration order within a rank. Matching walks the
table and takes the first route whose verb and shape fit, so
``GET /items/new`` is never shadowed by ``GET /items/{id}`` and vice versa.
"""

import re
from collections.abc import Iterator, Sequence

from finch.errors import ConfigurationError, DeclarationAnomaly, NotFound
from finch.routing.route import RANK_CAPTURE, RANK_LITERAL, CompiledRoute, PathSegment, RouteMatch

_CAPTURE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a path template into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/"               -> []

    Raises ``ConfigurationError`` for malformed templates: ``<name>``
    placeholders, unbalanced or embedded braces, invalid or repeated
    capture names.
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route path {path!r} uses <param> syntax. "
                "Use {param} for path parameters instead."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            name = part[1:-1]
            if not _CAPTURE_NAME.match(name):
                msg = f"Invalid path parameter name {name!r} in {path!r}"
                raise ConfigurationError(msg)
            if name in seen:
                msg = f"Path parameter {name!r} appears twice in {path!r}"
                raise ConfigurationError(msg)
            seen.add(name)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        elif "{" in part or "}" in part:
            msg = f"Malformed path segment {part!r} in {path!r}: captures must span a whole segment"
            raise ConfigurationError(msg)
        else:
            segments.append(PathSegment(value=part))
    return segments


def join_paths(base: str, relative: str) -> str:
    """Prefix *relative* with *base*, separated by exactly one slash.

    ``join_paths("/api/", "/users")`` → ``"/api/users"``;
    ``join_paths("/api", "")`` → ``"/api"``; ``join_paths("", "")`` → ``"/"``.
    """
    parts = [p.strip("/") for p in (base, relative)]
    joined = "/".join(p for p in parts if p)
    return f"/{joined}"


def specificity(segments: Sequence[PathSegment]) -> int:
    """Rank 0 for literal-only paths, 1 when any segment captures."""
    return RANK_CAPTURE if any(s.is_param for s in segments) else RANK_LITERAL


def split_request_path(path: str) -> list[str]:
    """Split a concrete request path; empty segments and trailing slashes are ignored."""
    return [p for p in path.strip("/").split("/") if p]


class RouteTable:
    """An immutable, ordered route table.

    Usage::

        table = RouteTableBuilder(handlers).build(registry)
        match = table.match("GET", "/items/42")
        match.path_params  # {"id": "42"}
    """

    __slots__ = ("_anomalies", "_routes")

    def __init__(
        self,
        routes: Sequence[CompiledRoute] = (),
        anomalies: Sequence[DeclarationAnomaly] = (),
    ) -> None:
        # Stable sort keeps declaration order within a rank.
        self._routes: tuple[CompiledRoute, ...] = tuple(sorted(routes, key=lambda r: r.rank))
        self._anomalies: tuple[DeclarationAnomaly, ...] = tuple(anomalies)

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        """All routes in match order."""
        return self._routes

    @property
    def anomalies(self) -> tuple[DeclarationAnomaly, ...]:
        """Declarations dropped or replaced while building."""
        return self._anomalies

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def match(self, verb: str, path: str) -> RouteMatch:
        """Return the first route matching *verb* and *path*.

        Raises ``NotFound`` when nothing matches, including paths that
        exist only under other verbs.
        """
        verb = verb.upper()
        parts = split_request_path(path)
        for route in self._routes:
            if route.verb != verb:
                continue
            params = route.match_parts(parts)
            if params is not None:
                return RouteMatch(route=route, path_params=params)
        raise NotFound(f"No route matches {verb} {path}")

    def allowed_verbs(self, path: str) -> frozenset[str]:
        """Verbs that have a route for *path* (introspection only)."""
        parts = split_request_path(path)
        return frozenset(r.verb for r in self._routes if r.match_parts(parts) is not None)
