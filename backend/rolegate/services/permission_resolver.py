"""Permission Resolver — role name → effective permission set.

Invariants:
    - One store read per call; no mutation, no caching across calls
    - Unknown role → empty set (indistinguishable from a zero-permission role)
    - Disabled role (is_enabled != 1) → RoleDisabledError, never a set
    - Returned set is the direct association set; manage expansion happens in
      core/enforce_permissions.py at decision time
"""

import logging

from rolegate.core.domain_types import PermissionSet, RoleName
from rolegate.core.errors import RoleDisabledError, ErrorContext
from rolegate.core.repository_protocols import RoleGrantReader

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Loads a role's effective permissions through a RoleGrantReader."""

    def __init__(self, reader: RoleGrantReader):
        self._reader = reader

    async def resolve(self, role_name: RoleName) -> PermissionSet:
        grants = await self._reader.find_role_grants(role_name)
        if grants is None:
            logger.debug(
                "Role not found, resolving to empty permission set",
                extra={"role_name": role_name},
            )
            return frozenset()
        if not grants.enabled:
            raise RoleDisabledError(
                role_name, ErrorContext(role_name=role_name),
            )
        return grants.permission_names
