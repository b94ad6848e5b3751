"""Authorization resolver — allow/deny for one request against one route.

Given the route's resolved ``AuthPolicy`` and the caller's ``Claims``:

1. ``Public`` → allow. Claims are not inspected.
2. No claims → 401. No validator runs.
3. ``Unspecified`` → allow (or 403 when built with ``deny=True``).
4. Chain policies run their validators in declared order:
   AND stops at the first failure and reports its message;
   OR stops at the first success, and when every validator fails reports
   the last one's message.
5. Every validator that actually ran gets its ``on_success`` or
   ``on_failure`` hook. Hook errors are logged and swallowed.

The resolver holds no per-request state; one instance serves every request.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from finch._internal.invoke import invoke
from finch.auth.claims import Claims
from finch.auth.policy import AuthPolicy, Public, Unspecified
from finch.auth.validators import (
    RequestMeta,
    ValidationOutcome,
    Validator,
    normalize_outcome,
    validator_name,
)
from finch.errors import AuthenticationRequired, AuthorizationDenied, HTTPError
from finch.security.audit import emit_security_event

_log = logging.getLogger("finch.security")

UNSPECIFIED_DENY_MESSAGE = "No access policy declared for this endpoint"


@dataclass(frozen=True, slots=True)
class AuthDecision:
    """Outcome of authorization for one request.

    ``status`` is 200 when allowed, 401 when no credential was presented,
    403 when a credential was presented but denied. ``executed`` names the
    validators that actually ran, in order.
    """

    allowed: bool
    status: int = 200
    code: str = ""
    message: str = ""
    executed: tuple[str, ...] = ()

    @classmethod
    def allow(cls, executed: Sequence[str] = ()) -> AuthDecision:
        return cls(allowed=True, executed=tuple(executed))

    @classmethod
    def unauthenticated(cls) -> AuthDecision:
        return cls(
            allowed=False,
            status=401,
            code="UNAUTHORIZED",
            message="Authentication required",
        )

    @classmethod
    def forbidden(cls, message: str, executed: Sequence[str] = ()) -> AuthDecision:
        return cls(
            allowed=False,
            status=403,
            code="FORBIDDEN",
            message=message,
            executed=tuple(executed),
        )

    def to_error(self) -> HTTPError:
        """The error envelope for a denial."""
        if self.allowed:
            msg = "An allowed decision has no error"
            raise ValueError(msg)
        if self.status == 401:
            return AuthenticationRequired(self.message)
        return AuthorizationDenied(self.message)


class AuthorizationResolver:
    """Evaluates resolved policies against request claims."""

    __slots__ = ()

    async def authorize(
        self,
        policy: AuthPolicy,
        claims: Claims,
        meta: RequestMeta,
    ) -> AuthDecision:
        """Decide whether the caller may reach the route."""
        if isinstance(policy, Public):
            return AuthDecision.allow()

        if not claims.is_present:
            emit_security_event("auth.required", meta=meta, details={"policy": policy.label})
            return AuthDecision.unauthenticated()

        if isinstance(policy, Unspecified):
            if policy.deny:
                emit_security_event(
                    "authz.denied",
                    meta=meta,
                    subject=claims.subject,
                    details={"policy": policy.label},
                )
                return AuthDecision.forbidden(UNSPECIFIED_DENY_MESSAGE)
            return AuthDecision.allow()

        decision = await self.evaluate_chain(
            policy.validators,
            require_all=policy.require_all,
            claims=claims,
            meta=meta,
        )
        if not decision.allowed:
            _log.info(
                "Access denied for %s %s (%s): %s",
                meta.method,
                meta.path,
                policy.label,
                decision.message,
            )
            emit_security_event(
                "authz.denied",
                meta=meta,
                subject=claims.subject,
                details={
                    "policy": policy.label,
                    "executed": list(decision.executed),
                    "message": decision.message,
                },
            )
        return decision

    async def evaluate_chain(
        self,
        validators: Sequence[Validator],
        *,
        require_all: bool,
        claims: Claims,
        meta: RequestMeta,
    ) -> AuthDecision:
        """Run a validator chain with AND (*require_all*) or OR semantics.

        An empty chain allows: the caller is authenticated and no further
        rule was declared.
        """
        executed: list[str] = []
        last_failure = ""

        for v in validators:
            name = validator_name(v)
            outcome = await self._evaluate(v, name, claims, meta)
            executed.append(name)

            if outcome.valid:
                await self._run_hook(v, name, "on_success", claims, meta)
                if not require_all:
                    return AuthDecision.allow(executed)
                continue

            reason = outcome.message or v.default_message
            await self._run_hook(v, name, "on_failure", claims, meta, reason)
            if require_all:
                return AuthDecision.forbidden(reason, executed)
            last_failure = reason

        if require_all or not executed:
            return AuthDecision.allow(executed)
        return AuthDecision.forbidden(last_failure, executed)

    async def _evaluate(
        self,
        v: Validator,
        name: str,
        claims: Claims,
        meta: RequestMeta,
    ) -> ValidationOutcome:
        """Evaluate one validator. A validator that raises has failed."""
        try:
            return normalize_outcome(await invoke(v.evaluate, claims, meta))
        except Exception:
            _log.exception("Validator %s raised during evaluation of %s %s", name, meta.method, meta.path)
            return ValidationOutcome.fail()

    async def _run_hook(
        self,
        v: Validator,
        name: str,
        hook_name: str,
        claims: Claims,
        meta: RequestMeta,
        *args: Any,
    ) -> None:
        """Call a success/failure hook. Errors never affect the verdict."""
        hook = getattr(v, hook_name, None)
        if hook is None:
            return
        try:
            await invoke(hook, claims, meta, *args)
        except Exception as exc:
            _log.exception("Validator %s %s hook raised", name, hook_name)
            emit_security_event(
                "authz.hook.error",
                meta=meta,
                subject=claims.subject,
                details={"validator": name, "hook": hook_name, "error": type(exc).__name__},
            )
