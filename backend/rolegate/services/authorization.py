"""Authorization Decision Engine — per-request allow/deny over the role graph.

Invariants:
    - Evaluation order: public → requirement → principal → role → resolve → evaluate
    - Public routes and routes without requirements never touch the store
    - A missing principal or role is denied before any store access
    - RoleDisabledError from the resolver becomes a ROLE_DISABLED deny
    - Every check is a fresh read; no decision is cached

Design Decisions:
    - authorize() returns a Decision; enforce() raises its AuthorizationError.
      The HTTP guard uses enforce(), tests and callers needing a verdict use authorize()
    - Principal passed explicitly, never read from ambient request state
    - No timeout of its own: inherits the store client's timeout
"""

import logging

from rolegate.core.domain_types import DenyReason, Principal, RequirementMode
from rolegate.core.enforce_permissions import (
    ALLOW, Decision, deny, evaluate_requirement,
)
from rolegate.core.errors import ErrorContext, RoleDisabledError
from rolegate.core.requirement import AuthorizationRequirement
from rolegate.services.permission_resolver import PermissionResolver

logger = logging.getLogger(__name__)


class AuthorizationEngine:
    """Decides whether a principal satisfies a route requirement."""

    def __init__(self, resolver: PermissionResolver):
        self._resolver = resolver

    async def authorize(
        self,
        principal: Principal | None,
        requirement: AuthorizationRequirement,
    ) -> Decision:
        if requirement.public:
            return ALLOW
        if requirement.mode is RequirementMode.NONE:
            return ALLOW
        if principal is None:
            return deny(DenyReason.AUTHENTICATION_MISSING)
        if not principal.role:
            return deny(DenyReason.ROLE_MISSING)

        try:
            effective = await self._resolver.resolve(principal.role)
        except RoleDisabledError:
            return deny(DenyReason.ROLE_DISABLED, role_name=principal.role)

        return evaluate_requirement(requirement, effective, principal.role)

    async def enforce(
        self,
        principal: Principal | None,
        requirement: AuthorizationRequirement,
        path: str | None = None,
    ) -> None:
        """Raise the structured deny signal unless the principal is authorized."""
        decision = await self.authorize(principal, requirement)
        subject_id = principal.subject_id if principal else None
        role_name = principal.role if principal else None
        if decision.allowed:
            logger.debug(
                "Authorization granted",
                extra={"subject_id": subject_id, "role_name": role_name, "path": path},
            )
            return
        logger.info(
            f"Authorization denied: {decision.reason.value}",
            extra={
                "subject_id": subject_id,
                "role_name": role_name,
                "deny_reason": decision.reason.value,
                "permissions": list(decision.permissions) or None,
                "path": path,
            },
        )
        raise decision.to_error(
            ErrorContext(subject_id=subject_id, role_name=role_name, path=path),
        )
