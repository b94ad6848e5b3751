"""Authorization — claims, validators, policies, and the resolver.

Usage::

    from finch.auth import ControllerPolicy, EndpointPolicy, Public, RoleValidator

    controller = ControllerDeclaration("Admin", "/admin", auth=ControllerPolicy([AdminValidator()]))
"""

from finch.auth.builtin import (
    AdminValidator,
    BusinessHoursValidator,
    ClaimEqualsValidator,
    DepartmentValidator,
    FinancialValidator,
    PermissionValidator,
    RoleValidator,
)
from finch.auth.claims import NO_CLAIMS, Claims, as_claims
from finch.auth.policy import (
    AuthPolicy,
    ControllerPolicy,
    EndpointPolicy,
    Public,
    Unspecified,
    resolve_policy,
)
from finch.auth.resolver import AuthDecision, AuthorizationResolver
from finch.auth.revocation import RevokedTokens
from finch.auth.validators import (
    BaseValidator,
    RequestMeta,
    ValidationOutcome,
    Validator,
    validator,
)

__all__ = [
    "NO_CLAIMS",
    "AdminValidator",
    "AuthDecision",
    "AuthPolicy",
    "AuthorizationResolver",
    "BaseValidator",
    "BusinessHoursValidator",
    "ClaimEqualsValidator",
    "Claims",
    "ControllerPolicy",
    "DepartmentValidator",
    "EndpointPolicy",
    "FinancialValidator",
    "PermissionValidator",
    "Public",
    "RequestMeta",
    "RevokedTokens",
    "RoleValidator",
    "Unspecified",
    "ValidationOutcome",
    "Validator",
    "as_claims",
    "resolve_policy",
    "validator",
]
