"""Tests for finch.auth.builtin — ready-made validators."""

import logging
from datetime import datetime

import pytest

from finch.auth.builtin import (
    AdminValidator,
    BusinessHoursValidator,
    ClaimEqualsValidator,
    DepartmentValidator,
    FinancialValidator,
    PermissionValidator,
    RoleValidator,
)
from finch.auth.claims import Claims
from finch.auth.validators import RequestMeta

# 2026-10-14 is a Wednesday.
WEDNESDAY_NOON = datetime(2026, 10, 14, 12, 0)
WEDNESDAY_NIGHT = datetime(2026, 10, 14, 22, 0)
SATURDAY_NOON = datetime(2026, 10, 17, 12, 0)


class TestRoleValidator:
    def test_matching_role(self, meta: RequestMeta) -> None:
        assert RoleValidator("editor", "admin").evaluate(Claims({"role": "admin"}), meta).valid

    def test_other_role(self, meta: RequestMeta) -> None:
        v = RoleValidator("admin")
        outcome = v.evaluate(Claims({"role": "user"}), meta)
        assert not outcome.valid
        assert v.default_message == "Requires role: admin"

    def test_requires_a_role(self) -> None:
        with pytest.raises(ValueError):
            RoleValidator()


class TestPermissionValidator:
    def test_require_all(self, meta: RequestMeta) -> None:
        v = PermissionValidator("read", "write")
        assert v.evaluate(Claims({"permissions": ["read", "write"]}), meta).valid
        outcome = v.evaluate(Claims({"permissions": ["read"]}), meta)
        assert outcome.message == "Missing permissions: write"

    def test_any(self, meta: RequestMeta) -> None:
        v = PermissionValidator("read", "write", require_all=False)
        assert v.evaluate(Claims({"permissions": ["write"]}), meta).valid
        assert not v.evaluate(Claims({"permissions": []}), meta).valid


class TestClaimEqualsValidator:
    def test_equal(self, meta: RequestMeta) -> None:
        v = ClaimEqualsValidator("tenant", "acme")
        assert v.evaluate(Claims({"tenant": "acme"}), meta) is True
        assert v.evaluate(Claims({"tenant": "other"}), meta) is False
        assert v.default_message == "Claim 'tenant' does not match"


class TestAdminValidator:
    @pytest.mark.parametrize(
        ("claims", "message"),
        [
            ({"role": "user", "active": True, "permissions": ["admin_access"]}, "User must be an administrator"),
            ({"role": "admin", "active": False, "permissions": ["admin_access"]}, "Administrator account is inactive"),
            ({"role": "admin", "active": True, "permissions": []}, "Missing admin access permission"),
        ],
    )
    def test_failures(self, claims: dict, message: str, meta: RequestMeta) -> None:
        outcome = AdminValidator().evaluate(Claims(claims), meta)
        assert not outcome.valid
        assert outcome.message == message

    def test_success(self, meta: RequestMeta) -> None:
        claims = Claims({"role": "admin", "active": True, "permissions": ["admin_access"]})
        assert AdminValidator().evaluate(claims, meta).valid

    def test_hooks_log(self, meta: RequestMeta, caplog: pytest.LogCaptureFixture) -> None:
        v = AdminValidator()
        claims = Claims({"sub": "a1", "name": "Ada"})
        with caplog.at_level(logging.INFO, logger="finch.security"):
            v.on_success(claims, meta)
            v.on_failure(claims, meta, "Administrator account is inactive")
        assert "Admin access granted to Ada" in caplog.text
        assert "Admin access denied for a1" in caplog.text


class TestDepartmentValidator:
    def test_allowed_department(self, meta: RequestMeta) -> None:
        v = DepartmentValidator(["finance", "hr"])
        assert v.evaluate(Claims({"department": "hr"}), meta).valid
        outcome = v.evaluate(Claims({"department": "sales"}), meta)
        assert outcome.message == "Access restricted to: finance, hr departments"

    def test_manager_level(self, meta: RequestMeta) -> None:
        v = DepartmentValidator(["finance"], require_manager_level=True)
        assert v.evaluate(Claims({"department": "finance", "employee_level": "director"}), meta).valid
        outcome = v.evaluate(Claims({"department": "finance", "employee_level": "staff"}), meta)
        assert outcome.message == "Management level access required"


class TestFinancialValidator:
    CERTIFIED = {
        "department": "finance",
        "clearance_level": 3,
        "certifications": ["financial_ops_certified"],
        "max_transaction_amount": 5000,
    }

    def test_certified(self, meta: RequestMeta) -> None:
        assert FinancialValidator().evaluate(Claims(self.CERTIFIED), meta).valid

    def test_low_clearance(self, meta: RequestMeta) -> None:
        outcome = FinancialValidator().evaluate(Claims({**self.CERTIFIED, "clearance_level": 2}), meta)
        assert outcome.message == "Insufficient clearance level for financial operations"

    def test_limit(self, meta: RequestMeta) -> None:
        outcome = FinancialValidator(minimum_amount=10_000).evaluate(Claims(self.CERTIFIED), meta)
        assert outcome.message == "Transaction amount exceeds user authorization limit"


class TestBusinessHoursValidator:
    def test_within_hours(self, meta: RequestMeta) -> None:
        v = BusinessHoursValidator(clock=lambda: WEDNESDAY_NOON)
        assert v.evaluate(Claims({}), meta).valid

    def test_after_hours(self, meta: RequestMeta) -> None:
        v = BusinessHoursValidator(clock=lambda: WEDNESDAY_NIGHT)
        outcome = v.evaluate(Claims({}), meta)
        assert outcome.message == "Access restricted to business hours (9:00 - 17:00)"

    def test_after_hours_override(self, meta: RequestMeta) -> None:
        v = BusinessHoursValidator(clock=lambda: WEDNESDAY_NIGHT)
        assert v.evaluate(Claims({"after_hours_access": True}), meta).valid

    def test_weekend(self, meta: RequestMeta) -> None:
        v = BusinessHoursValidator(clock=lambda: SATURDAY_NOON)
        outcome = v.evaluate(Claims({"after_hours_access": True}), meta)
        assert outcome.message == "Access restricted to business days"

    def test_invalid_hours(self) -> None:
        with pytest.raises(ValueError):
            BusinessHoursValidator(start_hour=18, end_hour=9)
