"""Validators — pluggable access rules evaluated against claims.

A validator inspects the caller's claims (and read-only request metadata)
and reports whether its rule holds. Validators are combined into AND/OR
chains by ``ControllerPolicy`` / ``EndpointPolicy``.

Three ways to write one::

    # 1. Subclass BaseValidator (hooks optional)
    class AdminOnly(BaseValidator):
        default_message = "Administrator access required"

        def evaluate(self, claims, meta):
            if claims.role != "admin":
                return ValidationOutcome.fail("User must be an administrator")
            return ValidationOutcome.ok()

    # 2. Decorate a predicate
    @validator("Finance department only")
    def finance(claims, meta):
        return claims.get_str("department") == "finance"

    # 3. Anything satisfying the Validator protocol

``evaluate`` and both hooks may be ``async def``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from finch.auth.claims import Claims
    from finch.http.headers import Headers
    from finch.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """The result of one validator evaluation.

    ``message`` is only meaningful on failure; when it is ``None`` the
    validator's ``default_message`` is reported instead.
    """

    valid: bool
    message: str | None = None

    @classmethod
    def ok(cls) -> ValidationOutcome:
        """A passing outcome."""
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str | None = None) -> ValidationOutcome:
        """A failing outcome, optionally with a specific message."""
        return cls(valid=False, message=message)

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True, slots=True)
class RequestMeta:
    """Read-only request metadata handed to validators and hooks."""

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str] = field(default_factory=dict)
    request_id: str = ""


@runtime_checkable
class Validator(Protocol):
    """Structural protocol for access-rule validators."""

    @property
    def default_message(self) -> str: ...

    def evaluate(
        self, claims: Claims, meta: RequestMeta
    ) -> ValidationOutcome | bool | Awaitable[ValidationOutcome | bool]: ...

    def on_success(self, claims: Claims, meta: RequestMeta) -> Any: ...

    def on_failure(self, claims: Claims, meta: RequestMeta, reason: str) -> Any: ...


class BaseValidator:
    """Convenience base class with no-op hooks.

    Subclasses set ``default_message`` and implement ``evaluate``.
    Override ``on_success`` / ``on_failure`` for auditing; exceptions
    raised by hooks are logged and never change the verdict.
    """

    default_message: str = "Access denied"

    def evaluate(
        self, claims: Claims, meta: RequestMeta
    ) -> ValidationOutcome | bool | Awaitable[ValidationOutcome | bool]:
        raise NotImplementedError

    def on_success(self, claims: Claims, meta: RequestMeta) -> Any:
        return None

    def on_failure(self, claims: Claims, meta: RequestMeta, reason: str) -> Any:
        return None

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"{self.name}()"


type Predicate = Callable[[Claims, RequestMeta], ValidationOutcome | bool | Awaitable[Any]]


class FunctionValidator(BaseValidator):
    """A validator wrapping a plain predicate function."""

    def __init__(self, fn: Predicate, default_message: str) -> None:
        self._fn = fn
        self.default_message = default_message

    def evaluate(self, claims: Claims, meta: RequestMeta) -> Any:
        return self._fn(claims, meta)

    @property
    def name(self) -> str:
        return getattr(self._fn, "__name__", "validator")

    def __repr__(self) -> str:
        return f"validator({self.name})"


def validator(default_message: str = "Access denied") -> Callable[[Predicate], FunctionValidator]:
    """Turn a predicate ``(claims, meta) -> bool | ValidationOutcome`` into a validator."""

    def decorator(fn: Predicate) -> FunctionValidator:
        return FunctionValidator(fn, default_message)

    return decorator


def normalize_outcome(result: Any) -> ValidationOutcome:
    """Coerce an ``evaluate`` return value into a ``ValidationOutcome``.

    ``True``/``False`` map to ok/fail; anything else is a programming error.
    """
    if isinstance(result, ValidationOutcome):
        return result
    if isinstance(result, bool):
        return ValidationOutcome(valid=result)
    msg = f"Validator returned {type(result).__name__}, expected ValidationOutcome or bool"
    raise TypeError(msg)


def validator_name(v: Any) -> str:
    """A readable name for logs and audit events."""
    name = getattr(v, "name", None)
    if isinstance(name, str):
        return name
    return type(v).__name__
