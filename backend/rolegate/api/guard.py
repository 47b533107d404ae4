"""Route Guard — FastAPI dependency that runs the authorization engine before a handler.

Invariants:
    - The route requirement is resolved ONCE, when the guard is constructed at
      route registration; requests only evaluate it
    - The principal is read from request.state.principal (set by the authentication
      collaborator) and passed explicitly into the engine
    - Deny signals propagate as AuthorizationError; error_handlers renders 403
    - Public routes and routes without requirements issue no query

Design Decisions:
    - Callable class over closure: the resolved requirement stays inspectable
      (guard.requirement) for tests and route listings
    - Dual any-of/all-of declarations keep all-of precedence and log a warning;
      rbac_reject_dual_requirements turns them into a registration-time error
    - request.state.principal may hold a Principal or the verified JWT claims
      mapping; anything else is treated as absent (fail-secure)
"""

import logging
from collections.abc import Mapping

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.config import get_settings
from rolegate.core.domain_types import Principal
from rolegate.core.errors import RequirementConflictError
from rolegate.core.requirement import (
    AuthorizationRequirement, dual_declaration, resolve_requirement,
)
from rolegate.infrastructure.database import get_db
from rolegate.infrastructure.rbac_repository import SqlAlchemyRbacRepository
from rolegate.services.authorization import AuthorizationEngine
from rolegate.services.permission_resolver import PermissionResolver

logger = logging.getLogger(__name__)


def get_request_principal(request: Request) -> Principal | None:
    """Principal attached by the authentication layer, if any."""
    principal = getattr(request.state, "principal", None)
    if isinstance(principal, Principal):
        return principal
    if isinstance(principal, Mapping) and "sub" in principal:
        try:
            return Principal.from_claims(principal)
        except (TypeError, ValueError):
            logger.warning(
                "Unusable subject claim, treating request as unauthenticated",
                extra={"path": request.url.path},
            )
            return None
    return None


class RouteGuard:
    """Dependency enforcing one resolved AuthorizationRequirement."""

    def __init__(
        self,
        requirement: AuthorizationRequirement | None,
        fallback: AuthorizationRequirement | None = None,
        route: str = "<unnamed>",
        reject_dual: bool | None = None,
    ):
        self.route = route
        self.requirement = resolve_requirement(requirement, fallback)
        if dual_declaration(self.requirement):
            if reject_dual is None:
                reject_dual = get_settings().rbac_reject_dual_requirements
            if reject_dual:
                raise RequirementConflictError(route)
            logger.warning(
                f"Route {route} declares both any-of and all-of permissions; "
                f"any-of will not be evaluated",
                extra={"path": route},
            )

    async def __call__(
        self, request: Request, db: AsyncSession = Depends(get_db),
    ) -> Principal | None:
        principal = get_request_principal(request)
        engine = AuthorizationEngine(
            PermissionResolver(SqlAlchemyRbacRepository(db)),
        )
        await engine.enforce(principal, self.requirement, path=request.url.path)
        return principal


def require(
    requirement: AuthorizationRequirement | None,
    fallback: AuthorizationRequirement | None = None,
    route: str = "<unnamed>",
    reject_dual: bool | None = None,
) -> RouteGuard:
    """Build the guard for one route. Use with Depends()."""
    return RouteGuard(requirement, fallback, route, reject_dual)
