"""RBAC Schemas — response models for the role/permission query endpoints.

Invariants:
    - RolePermissionsResponse.count == len(permissions)
    - PermissionSummary built straight from Permission rows (from_attributes)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PermissionSummary(BaseModel):
    """Public view of one permission row."""
    model_config = ConfigDict(from_attributes=True)

    name: str
    display_name: str
    description: str | None = None
    resource: str
    action: str


class RolePermissionsResponse(BaseModel):
    role: str
    permissions: list[PermissionSummary]
    count: int


class RbacHealthResponse(BaseModel):
    status: str
    module: str
    timestamp: datetime
