"""Permission Enforcement — pure evaluation of a requirement against an effective set.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Superset expansion happens here, at decision time — never in the stored set
    - "<resource>:manage" satisfies create/read/update/delete on the same resource only
    - all-of denial reports exactly the unsatisfied subset, in declaration order
    - any-of denial reports the full requested list

Design Decisions:
    - Return Decision values (not exceptions): the engine owns the mapping to errors,
      keeping these rules testable without mocks (ADR: Functional Core)
"""

from collections.abc import Iterable
from dataclasses import dataclass

from rolegate.core.domain_types import (
    Action, DenyReason, PermissionSet, RequirementMode, RoleName,
    permission_name, split_permission_name,
)
from rolegate.core.errors import (
    AuthorizationError, AuthenticationMissingError, ErrorContext,
    PermissionDeniedError, RoleDisabledError, RoleMissingError,
)
from rolegate.core.requirement import AuthorizationRequirement


@dataclass(frozen=True)
class Decision:
    """Outcome of one authorization evaluation."""
    allowed: bool
    reason: DenyReason | None = None
    permissions: tuple[str, ...] = ()
    role_name: RoleName | None = None

    def to_error(self, context: ErrorContext | None = None) -> AuthorizationError:
        """Structured deny signal for this decision. Only valid when not allowed."""
        if self.allowed:
            raise ValueError("Allow decision has no error")
        if self.reason is DenyReason.AUTHENTICATION_MISSING:
            return AuthenticationMissingError(context)
        if self.reason is DenyReason.ROLE_MISSING:
            return RoleMissingError(context)
        if self.reason is DenyReason.ROLE_DISABLED:
            return RoleDisabledError(self.role_name or "", context)
        mode = "all" if self.reason is DenyReason.PERMISSION_DENIED_ALL else "any"
        return PermissionDeniedError(mode, self.permissions, context)


ALLOW = Decision(allowed=True)


def deny(
    reason: DenyReason,
    permissions: Iterable[str] = (),
    role_name: RoleName | None = None,
) -> Decision:
    return Decision(
        allowed=False, reason=reason,
        permissions=tuple(permissions), role_name=role_name,
    )


def is_satisfied(permission: str, effective: PermissionSet) -> bool:
    """Direct membership, or the same resource's manage permission."""
    if permission in effective:
        return True
    parts = split_permission_name(permission)
    if parts is None:
        return False
    resource, action = parts
    if action == Action.MANAGE.value:
        return False
    return permission_name(resource, Action.MANAGE) in effective


def missing_permissions(
    required: Iterable[str], effective: PermissionSet,
) -> list[str]:
    """Unsatisfied subset of required, preserving order."""
    return [p for p in required if not is_satisfied(p, effective)]


def has_any_permission(
    candidates: Iterable[str], effective: PermissionSet,
) -> bool:
    return any(is_satisfied(p, effective) for p in candidates)


def evaluate_requirement(
    requirement: AuthorizationRequirement,
    effective: PermissionSet,
    role_name: RoleName | None = None,
) -> Decision:
    """Evaluate a resolved requirement. All-of takes precedence over any-of."""
    mode = requirement.mode
    if mode is RequirementMode.ALL_OF:
        missing = missing_permissions(requirement.all_of, effective)
        if missing:
            return deny(DenyReason.PERMISSION_DENIED_ALL, missing, role_name)
        return ALLOW
    if mode is RequirementMode.ANY_OF:
        if not has_any_permission(requirement.any_of, effective):
            return deny(
                DenyReason.PERMISSION_DENIED_ANY, requirement.any_of, role_name,
            )
        return ALLOW
    return ALLOW
