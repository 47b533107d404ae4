"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - RoleGrants.permission_names is the effective set BEFORE superset expansion

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE their results are never async themselves
    - find_role_grants loads role + associations + names in one call: no lazy
      relationship fetches hidden behind attribute access
"""

from dataclasses import dataclass
from typing import Protocol, Sequence

from rolegate.core.domain_types import PermissionSet, RoleName
from rolegate.core.seed_catalog import PermissionDefinition, RoleDefinition


@dataclass(frozen=True)
class RoleGrants:
    """A role's enablement flag together with its direct permission names."""
    role_id: int
    role_name: RoleName
    is_enabled: int
    permission_names: PermissionSet

    @property
    def enabled(self) -> bool:
        return self.is_enabled == 1


class RoleGrantReader(Protocol):
    """Read contract used by the permission resolver — implemented by shell."""
    async def find_role_grants(self, role_name: RoleName) -> RoleGrants | None: ...


class SeedWriter(Protocol):
    """Write contract used by the seed bootstrapper — implemented by shell.

    Every upsert inserts missing rows and leaves existing rows untouched.
    """
    async def acquire_seed_lock(self, key: int) -> None: ...
    async def count_system_permissions(self) -> int: ...
    async def upsert_permissions(
        self, definitions: Sequence[PermissionDefinition],
    ) -> dict[str, int]: ...
    async def upsert_roles(
        self, definitions: Sequence[RoleDefinition],
    ) -> dict[str, int]: ...
    async def upsert_role_permissions(
        self, pairs: Sequence[tuple[int, int]],
    ) -> None: ...
