"""RBAC Routes — read-only role/permission queries.

Invariants:
    - GET /roles/{role_name}/permissions requires ALL of role:read and permission:read
    - GET /health is public: the handler-level public marker overrides the router default
    - Unknown role and role without permissions both answer 404

Design Decisions:
    - Router-level default requirement passed as fallback to each guard, mirroring
      handler-over-router resolution at registration time
    - Direct associations only in the listing: manage expansion is a decision-time
      rule, not a property of the stored grant set
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.api.guard import require
from rolegate.core.domain_types import Principal
from rolegate.core.errors import ResourceNotFoundError
from rolegate.core.requirement import all_of, public
from rolegate.infrastructure.database import get_db
from rolegate.infrastructure.rbac_repository import SqlAlchemyRbacRepository
from rolegate.schemas.rbac import (
    PermissionSummary, RbacHealthResponse, RolePermissionsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rbac", tags=["rbac"])

ROUTER_REQUIREMENT = all_of("role:read", "permission:read")

read_role_permissions_guard = require(
    None, fallback=ROUTER_REQUIREMENT,
    route="GET /api/v1/rbac/roles/{role_name}/permissions",
)
health_guard = require(
    public(), fallback=ROUTER_REQUIREMENT, route="GET /api/v1/rbac/health",
)


@router.get(
    "/roles/{role_name}/permissions", response_model=RolePermissionsResponse,
)
async def get_role_permissions(
    role_name: str,
    principal: Principal | None = Depends(read_role_permissions_guard),
    db: AsyncSession = Depends(get_db),
):
    """List the permissions directly granted to a role."""
    permissions = await SqlAlchemyRbacRepository(db).list_role_permissions(role_name)
    if not permissions:
        raise ResourceNotFoundError("Role", role_name)
    return RolePermissionsResponse(
        role=role_name,
        permissions=[PermissionSummary.model_validate(p) for p in permissions],
        count=len(permissions),
    )


@router.get(
    "/health", response_model=RbacHealthResponse,
    dependencies=[Depends(health_guard)],
)
async def rbac_health():
    """Module liveness marker."""
    return RbacHealthResponse(
        status="ok", module="rbac", timestamp=datetime.now(timezone.utc),
    )
