"""Endpoint declarations — the engine's input.

Whatever discovers controllers (decorators, a code generator, a config
file) hands the engine a flat list of ``EndpointDeclaration`` plus the
``ControllerDeclaration`` each belongs to. Nothing here inspects source
code or resolves names; these are plain frozen records.

Usage::

    registry = DeclarationRegistry()
    registry.controller("Items", "/api/items", auth=ControllerPolicy([RoleValidator("user")]))
    registry.add(EndpointDeclaration(
        controller="Items",
        method="list_items",
        verb="GET",
        path="",
        params=(ParameterSpec.query("page", int, required=True),),
    ))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import Any

from finch.auth.policy import ControllerPolicy, EndpointPolicy, Public
from finch.errors import ConfigurationError

_log = logging.getLogger("finch.routing")


class ParamSource(StrEnum):
    """Where a handler argument comes from."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"
    CONTEXT = "context"


class _Marker(Enum):
    ALL = "*"
    NO_DEFAULT = "<no default>"

    def __repr__(self) -> str:
        return self.name


ALL = _Marker.ALL
"""Parameter name meaning "the whole source" (all query params, the full body, ...)."""

NO_DEFAULT = _Marker.NO_DEFAULT
"""Marks a ``ParameterSpec`` without a declared default (``None`` is a valid default)."""

# Argument names used when a spec binds a whole source and declares none.
_ALL_ARGUMENTS: dict[ParamSource, str] = {
    ParamSource.PATH: "path_params",
    ParamSource.QUERY: "query",
    ParamSource.HEADER: "headers",
    ParamSource.BODY: "body",
    ParamSource.CONTEXT: "context",
}


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """How to produce one handler argument.

    Attributes:
        source: Where the value is read from.
        name: Field name within the source, or ``ALL`` for the whole source.
        required: Absence is a binding failure.
        default: Used when absent and not required. ``NO_DEFAULT`` falls
            back to a type-appropriate empty value.
        type_hint: Target type (``str``, ``int``, ``float``, ``bool``,
            ``dict``, ``list``, a dataclass, or ``"int"``-style names).
        argument: Keyword the handler receives. Derived from *name* when
            omitted (``X-Request-ID`` → ``x_request_id``).
    """

    source: ParamSource
    name: str | _Marker
    required: bool = False
    default: Any = NO_DEFAULT
    type_hint: Any = str
    argument: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", ParamSource(self.source))
        if isinstance(self.name, str) and not self.name:
            msg = "ParameterSpec name must not be empty; use ALL for the whole source"
            raise ConfigurationError(msg)
        if self.name is ALL and self.type_hint is str and self.source is not ParamSource.BODY:
            object.__setattr__(self, "type_hint", dict)

    @property
    def binds_all(self) -> bool:
        return self.name is ALL

    @property
    def arg_name(self) -> str:
        """The keyword argument this spec binds."""
        if self.argument:
            return self.argument
        if self.name is ALL:
            return _ALL_ARGUMENTS[self.source]
        return str(self.name).lower().replace("-", "_")

    @property
    def label(self) -> str:
        """Human-readable name used in failure messages."""
        return "*" if self.name is ALL else str(self.name)

    # -- Constructors with source-appropriate defaults --

    @classmethod
    def path(cls, name: str, type_hint: Any = str, *, argument: str | None = None) -> ParameterSpec:
        return cls(ParamSource.PATH, name, required=True, type_hint=type_hint, argument=argument)

    @classmethod
    def query(
        cls,
        name: str | _Marker,
        type_hint: Any = str,
        *,
        required: bool = False,
        default: Any = NO_DEFAULT,
        argument: str | None = None,
    ) -> ParameterSpec:
        return cls(ParamSource.QUERY, name, required, default, type_hint, argument)

    @classmethod
    def header(
        cls,
        name: str | _Marker,
        type_hint: Any = str,
        *,
        required: bool = False,
        default: Any = NO_DEFAULT,
        argument: str | None = None,
    ) -> ParameterSpec:
        return cls(ParamSource.HEADER, name, required, default, type_hint, argument)

    @classmethod
    def body(
        cls,
        name: str | _Marker = ALL,
        type_hint: Any = dict,
        *,
        required: bool = True,
        default: Any = NO_DEFAULT,
        argument: str | None = None,
    ) -> ParameterSpec:
        return cls(ParamSource.BODY, name, required, default, type_hint, argument)

    @classmethod
    def context(
        cls,
        name: str | _Marker,
        type_hint: Any = None,
        *,
        required: bool = False,
        default: Any = NO_DEFAULT,
        argument: str | None = None,
    ) -> ParameterSpec:
        return cls(ParamSource.CONTEXT, name, required, default, type_hint, argument)


@dataclass(frozen=True, slots=True)
class EndpointDeclaration:
    """One declared endpoint, as emitted by the metadata extractor.

    ``path`` is relative to the controller's base path; ``""`` means the
    base path itself. ``verb`` and ``path`` may be missing in malformed
    input; the route builder drops such declarations with a warning.
    """

    controller: str
    method: str
    verb: str | None
    path: str | None
    params: tuple[ParameterSpec, ...] = ()
    auth: Public | EndpointPolicy | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def identity(self) -> str:
        return f"{self.controller}.{self.method}"


@dataclass(frozen=True, slots=True)
class ControllerDeclaration:
    """A controller: its base path and the policy its endpoints inherit."""

    name: str
    base_path: str = ""
    auth: ControllerPolicy | None = None


@dataclass(frozen=True, slots=True)
class ControllerGroup:
    """A controller with its endpoints, in declaration order."""

    controller: ControllerDeclaration
    endpoints: tuple[EndpointDeclaration, ...] = field(default_factory=tuple)


class DeclarationRegistry:
    """Collects declarations and groups them per controller.

    Controllers keep registration order; endpoints keep declaration order.
    An endpoint naming an undeclared controller gets an implicit one with
    base path ``""`` and no policy.
    """

    __slots__ = ("_controllers", "_endpoints", "_frozen")

    def __init__(self, declarations: Iterable[EndpointDeclaration] = ()) -> None:
        self._controllers: dict[str, ControllerDeclaration] = {}
        self._endpoints: dict[str, list[EndpointDeclaration]] = {}
        self._frozen = False
        self.extend(declarations)

    def _check_open(self) -> None:
        if self._frozen:
            msg = "Cannot add declarations after the route table was built."
            raise RuntimeError(msg)

    def controller(
        self,
        name: str,
        base_path: str = "",
        auth: ControllerPolicy | None = None,
    ) -> ControllerDeclaration:
        """Declare (or re-declare identically) a controller."""
        self._check_open()
        declaration = ControllerDeclaration(name=name, base_path=base_path, auth=auth)
        existing = self._controllers.get(name)
        if existing is not None and existing != declaration:
            msg = f"Controller {name!r} is already declared with a different base path or policy."
            raise ConfigurationError(msg)
        self._controllers[name] = declaration
        self._endpoints.setdefault(name, [])
        return declaration

    def add(self, declaration: EndpointDeclaration) -> None:
        """Add one endpoint declaration."""
        self._check_open()
        if declaration.controller not in self._controllers:
            _log.debug("Implicit controller %r for %s", declaration.controller, declaration.identity)
            self._controllers[declaration.controller] = ControllerDeclaration(declaration.controller)
            self._endpoints[declaration.controller] = []
        self._endpoints[declaration.controller].append(declaration)

    def extend(self, declarations: Iterable[EndpointDeclaration]) -> None:
        """Add endpoint declarations in order."""
        for declaration in declarations:
            self.add(declaration)

    def freeze(self) -> None:
        """Reject further additions."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def groups(self) -> list[ControllerGroup]:
        """Controllers with their endpoints, in registration order."""
        return [
            ControllerGroup(controller, tuple(self._endpoints[name]))
            for name, controller in self._controllers.items()
        ]

    def get_controller(self, name: str) -> ControllerDeclaration | None:
        return self._controllers.get(name)

    def __iter__(self) -> Iterator[EndpointDeclaration]:
        for endpoints in self._endpoints.values():
            yield from endpoints

    def __len__(self) -> int:
        return sum(len(endpoints) for endpoints in self._endpoints.values())
