"""PathSegment, CompiledRoute, and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from finch.auth.policy import AuthPolicy
from finch.declarations import ParameterSpec

RANK_LITERAL = 0
RANK_CAPTURE = 1


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a path template.

    Literal:  ``/users``  (is_param=False)
    Capture:  ``/{id}``   (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A route ready for matching. Built once, read-only thereafter.

    ``policy`` is already resolved (public / endpoint / controller /
    unspecified); ``handler`` is the concrete callable from the
    ``HandlerTable``.
    """

    verb: str
    path: str
    segments: tuple[PathSegment, ...]
    rank: int
    policy: AuthPolicy
    params: tuple[ParameterSpec, ...]
    handler: Callable[..., Any]
    controller: str
    method: str

    @property
    def identity(self) -> str:
        return f"{self.controller}.{self.method}"

    @property
    def captures(self) -> tuple[str, ...]:
        return tuple(s.param_name for s in self.segments if s.is_param and s.param_name)

    def match_parts(self, parts: list[str]) -> dict[str, str] | None:
        """Match pre-split path parts. Returns captures, or ``None``."""
        if len(parts) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for segment, part in zip(self.segments, parts, strict=True):
            if segment.is_param:
                params[segment.param_name or ""] = part
            elif segment.value != part:
                return None
        return params


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: CompiledRoute
    path_params: dict[str, str]
