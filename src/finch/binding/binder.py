"""Parameter binder — turn a matched request into handler keyword arguments.

Every declared ``ParameterSpec`` is evaluated, even after an earlier one
failed, so a single 400 response reports every bad parameter at once.

Resolution per source:

- **path**: the route capture (always present when the route matched).
- **query** / **header**: first value for the name, or the whole source as
  a ``dict[str, str]`` for ``ALL``. Header lookups are case-insensitive.
- **body**: the payload decoded by content type (JSON, URL-encoded form,
  multipart). ``ALL`` is the whole payload, a name is one field of it.
- **context**: per-request state (``claims``, ``request_id``, ``request``).

Absent + required is a failure. Absent + optional takes the declared
default or a type-appropriate empty value. Present values are coerced to
the type hint; a value that does not convert is a failure.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from finch.binding.convert import coerce, empty_value, normalize_hint, type_name
from finch.config import EngineConfig
from finch.declarations import NO_DEFAULT, ParameterSpec, ParamSource
from finch.errors import BindingError
from finch.http.forms import FORM_CONTENT_TYPES, media_type
from finch.http.request import Request

_log = logging.getLogger("finch.dispatch")

_ABSENT: Any = object()


class FailureReason(StrEnum):
    MISSING = "missing"
    INVALID_TYPE = "invalid_type"
    MALFORMED_BODY = "malformed_body"


@dataclass(frozen=True, slots=True)
class BindingFailure:
    """One parameter that could not be bound."""

    argument: str
    name: str
    source: ParamSource
    reason: FailureReason
    message: str


@dataclass(frozen=True, slots=True)
class BindResult:
    """Bound keyword arguments plus every failure encountered."""

    arguments: dict[str, Any]
    failures: tuple[BindingFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def validations(self) -> dict[str, str]:
        """``{argument: message}``, first failure per argument."""
        result: dict[str, str] = {}
        for failure in self.failures:
            result.setdefault(failure.argument, failure.message)
        return result

    def raise_for_failures(self) -> None:
        """Raise ``BindingError`` if any parameter failed."""
        if self.failures:
            raise BindingError(self.validations)


@dataclass(frozen=True, slots=True)
class _Body:
    """A decoded request body, or the reason it could not be decoded."""

    payload: Any = _ABSENT
    error: str | None = None


class ParameterBinder:
    """Binds ``ParameterSpec`` declarations against one request.

    Stateless apart from configuration; one instance serves every request.
    """

    __slots__ = ("_max_body",)

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._max_body = (config or EngineConfig()).max_content_length

    async def bind(
        self,
        specs: Sequence[ParameterSpec],
        request: Request,
        *,
        path_params: Mapping[str, str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> BindResult:
        captures = request.path_params if path_params is None else path_params
        ctx = context or {}
        body: _Body | None = None
        if any(spec.source is ParamSource.BODY for spec in specs):
            body = await self.load_body(request)

        arguments: dict[str, Any] = {}
        failures: list[BindingFailure] = []
        for spec in specs:
            try:
                raw = self._lookup(spec, request, captures, ctx, body)
            except _MalformedBody as exc:
                failures.append(_failure(spec, FailureReason.MALFORMED_BODY, str(exc)))
                continue

            if raw is _ABSENT:
                if spec.required:
                    failures.append(
                        _failure(
                            spec,
                            FailureReason.MISSING,
                            f"Required {spec.source} parameter '{spec.label}' is missing",
                        )
                    )
                elif spec.default is not NO_DEFAULT:
                    arguments[spec.arg_name] = spec.default
                else:
                    arguments[spec.arg_name] = empty_value(spec.type_hint)
                continue

            try:
                arguments[spec.arg_name] = coerce(raw, spec.type_hint)
            except (ValueError, TypeError) as exc:
                _log.debug("Coercion of %s %r failed: %s", spec.source, spec.label, exc)
                failures.append(
                    _failure(
                        spec,
                        FailureReason.INVALID_TYPE,
                        f"Parameter '{spec.label}' must be of type {type_name(spec.type_hint)}",
                    )
                )

        return BindResult(arguments, tuple(failures))

    def _lookup(
        self,
        spec: ParameterSpec,
        request: Request,
        captures: Mapping[str, str],
        context: Mapping[str, Any],
        body: _Body | None,
    ) -> Any:
        """The raw value for *spec*, or ``_ABSENT``."""
        match spec.source:
            case ParamSource.PATH:
                if spec.binds_all:
                    return dict(captures)
                return captures.get(str(spec.name), _ABSENT)
            case ParamSource.QUERY:
                if spec.binds_all:
                    return request.query.to_dict()
                if normalize_hint(spec.type_hint) is list:
                    values = request.query.get_list(str(spec.name))
                    return values or _ABSENT
                value = request.query.get(str(spec.name))
                return _ABSENT if value is None else value
            case ParamSource.HEADER:
                if spec.binds_all:
                    return request.headers.to_dict()
                if normalize_hint(spec.type_hint) is list:
                    values = request.headers.get_list(str(spec.name))
                    return values or _ABSENT
                value = request.headers.get(str(spec.name))
                return _ABSENT if value is None else value
            case ParamSource.CONTEXT:
                if spec.binds_all:
                    return dict(context)
                return context.get(str(spec.name), _ABSENT)
            case ParamSource.BODY:
                assert body is not None
                if body.error is not None:
                    raise _MalformedBody(body.error)
                if body.payload is _ABSENT or spec.binds_all:
                    return body.payload
                if not isinstance(body.payload, Mapping):
                    raise _MalformedBody(f"Request body must be an object to read field '{spec.label}'")
                value = body.payload.get(str(spec.name), _ABSENT)
                return _ABSENT if value is None else value
        return _ABSENT

    async def load_body(self, request: Request) -> _Body:
        """Read and decode the request body once."""
        declared = request.content_length
        if declared is not None and declared > self._max_body:
            return _Body(error=f"Request body exceeds {self._max_body} bytes")
        raw = await request.body()
        if len(raw) > self._max_body:
            return _Body(error=f"Request body exceeds {self._max_body} bytes")
        if not raw.strip():
            return _Body()

        content_type = request.content_type or ""
        kind = media_type(content_type)
        if kind in FORM_CONTENT_TYPES:
            try:
                return _Body(payload=(await request.form()).to_dict())
            except (ValueError, UnicodeDecodeError):
                return _Body(error="Request body is not valid form data")
        if not kind or kind == "application/json" or kind.endswith("+json"):
            try:
                payload = json.loads(raw)
            except (ValueError, UnicodeDecodeError):
                return _Body(error="Request body is not valid JSON")
            # A JSON null body carries no value.
            return _Body() if payload is None else _Body(payload=payload)
        return _Body(error=f"Unsupported content type '{kind}'")


class _MalformedBody(Exception):
    pass


def _failure(spec: ParameterSpec, reason: FailureReason, message: str) -> BindingFailure:
    return BindingFailure(
        argument=spec.arg_name,
        name=spec.label,
        source=spec.source,
        reason=reason,
        message=message,
    )
