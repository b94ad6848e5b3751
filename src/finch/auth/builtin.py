"""Ready-made validators for common claim shapes.

Each one reads conventional claims (``role``, ``permissions``,
``department``, ...) and can be dropped straight into a policy::

    ControllerPolicy([AdminValidator()])
    EndpointPolicy([RoleValidator("editor"), RoleValidator("admin")], require_all=False)
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from finch.auth.claims import Claims
from finch.auth.validators import BaseValidator, RequestMeta, ValidationOutcome

_log = logging.getLogger("finch.security")


class RoleValidator(BaseValidator):
    """Passes when the ``role`` claim is one of *roles*."""

    def __init__(self, *roles: str, message: str | None = None) -> None:
        if not roles:
            msg = "RoleValidator needs at least one role"
            raise ValueError(msg)
        self.roles = frozenset(roles)
        self.default_message = message or f"Requires role: {', '.join(sorted(self.roles))}"

    def evaluate(self, claims: Claims, meta: RequestMeta) -> ValidationOutcome:
        if claims.role in self.roles:
            return ValidationOutcome.ok()
        return ValidationOutcome.fail()

    def __repr__(self) -> str:
        return f"RoleValidator({', '.join(sorted(self.roles))})"


class PermissionValidator(BaseValidator):
    """Passes when the ``permissions`` claim holds the listed permissions.

    With ``require_all=False`` any single listed permission is enough.
    """

    def __init__(self, *permissions: str, require_all: bool = True) -> None:
        self.permissions = frozenset(permissions)
        self.require_all = require_all
        self.default_message = "Missing required permissions"

    def evaluate(self, claims: Claims, meta: RequestMeta) -> ValidationOutcome:
        held = claims.permissions
        if self.require_all:
            missing = self.permissions - held
            if missing:
                return ValidationOutcome.fail(f"Missing permissions: {', '.join(sorted(missing))}")
            return ValidationOutcome.ok()
        if self.permissions & held:
            return ValidationOutcome.ok()
        return ValidationOutcome.fail()


class ClaimEqualsValidator(BaseValidator):
    """Passes when claim *key* equals *expected*."""

    def __init__(self, key: str, expected: Any, message: str | None = None) -> None:
        self.key = key
        self.expected = expected
        self.default_message = message or f"Claim '{key}' does not match"

    def evaluate(self, claims: Claims, meta: RequestMeta) -> bool:
        return claims.get(self.key) == self.expected


class AdminValidator(BaseValidator):
    """Administrator access: role ``admin``, active account, ``admin_access`` permission."""

    default_message = "Administrator access required"

    def evaluate(self, claims: Claims, meta: RequestMeta) -> ValidationOutcome:
        if claims.role != "admin":
            return ValidationOutcome.fail("User must be an administrator")
        if not claims.get_bool("active"):
            return ValidationOutcome.fail("Administrator account is inactive")
        if "admin_access" not in claims.permissions:
            return ValidationOutcome.fail("Missing admin access permission")
        return ValidationOutcome.ok()

    def on_success(self, claims: Claims, meta: RequestMeta) -> None:
        _log.info(
            "[%s] Admin access granted to %s",
            meta.request_id or "-",
            claims.get_str("name") or claims.subject or "unknown",
        )

    def on_failure(self, claims: Claims, meta: RequestMeta, reason: str) -> None:
        _log.warning(
            "[%s] Admin access denied for %s at %s: %s",
            meta.request_id or "-",
            claims.get_str("email") or claims.subject or "unknown",
            meta.path,
            reason,
        )


class DepartmentValidator(BaseValidator):
    """Restricts access to listed departments, optionally manager level and up."""

    default_message = "Department access required"

    _MANAGER_LEVELS = frozenset({"manager", "director"})

    def __init__(self, allowed: Iterable[str], *, require_manager_level: bool = False) -> None:
        self.allowed = tuple(allowed)
        self.require_manager_level = require_manager_level

    def evaluate(self, claims: Claims, meta: RequestMeta) -> ValidationOutcome:
        department = claims.get_str("department")
        if department is None or department not in self.allowed:
            return ValidationOutcome.fail(
                f"Access restricted to: {', '.join(self.allowed)} departments"
            )
        if self.require_manager_level and claims.get_str("employee_level") not in self._MANAGER_LEVELS:
            return ValidationOutcome.fail("Management level access required")
        return ValidationOutcome.ok()


class FinancialValidator(BaseValidator):
    """Financial operations: finance/accounting department, clearance 3+, certification.

    When *minimum_amount* is set, the caller's ``max_transaction_amount``
    claim must cover it.
    """

    default_message = "Financial operations access required"

    def __init__(self, minimum_amount: float = 0.0) -> None:
        self.minimum_amount = minimum_amount

    def evaluate(self, claims: Claims, meta: RequestMeta) -> ValidationOutcome:
        if claims.get_str("department") not in ("finance", "accounting"):
            return ValidationOutcome.fail("Access restricted to financial departments")
        if (claims.get_int("clearance_level") or 0) < 3:
            return ValidationOutcome.fail("Insufficient clearance level for financial operations")
        if "financial_ops_certified" not in claims.get_list("certifications"):
            return ValidationOutcome.fail("Financial operations certification required")
        limit = claims.get_float("max_transaction_amount") or 0.0
        if self.minimum_amount > 0 and limit < self.minimum_amount:
            return ValidationOutcome.fail("Transaction amount exceeds user authorization limit")
        return ValidationOutcome.ok()


class BusinessHoursValidator(BaseValidator):
    """Allows access on business days within business hours.

    ``weekdays`` uses ISO numbering (Monday=1 … Sunday=7). Callers with a
    truthy ``after_hours_access`` claim may enter outside the hours, but
    not on other days. *clock* is injectable for tests.
    """

    default_message = "Business hours access required"

    def __init__(
        self,
        start_hour: int = 9,
        end_hour: int = 17,
        weekdays: Iterable[int] = (1, 2, 3, 4, 5),
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if not 0 <= start_hour < end_hour <= 24:
            msg = f"Invalid business hours: {start_hour}-{end_hour}"
            raise ValueError(msg)
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.weekdays = frozenset(weekdays)
        self.clock = clock

    def evaluate(self, claims: Claims, meta: RequestMeta) -> ValidationOutcome:
        now = self.clock()
        if now.isoweekday() not in self.weekdays:
            return ValidationOutcome.fail("Access restricted to business days")
        if not self.start_hour <= now.hour < self.end_hour and not claims.get_bool("after_hours_access"):
            return ValidationOutcome.fail(
                f"Access restricted to business hours ({self.start_hour}:00 - {self.end_hour}:00)"
            )
        return ValidationOutcome.ok()
