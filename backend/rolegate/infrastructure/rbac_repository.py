"""RBAC Repository — SQLAlchemy implementation of the role/permission store contracts.

Invariants:
    - find_role_grants issues exactly one SELECT (roles ⟕ role_permissions ⟕ permissions)
    - A role with zero associations still yields RoleGrants (empty permission_names)
    - Upserts insert missing rows only; existing rows are never overwritten
    - Never commits: the caller owns the transaction boundary

Design Decisions:
    - Dialect-specific INSERT ... ON CONFLICT DO NOTHING over find-then-insert: closes
      the read-then-write race between replicas booting at the same time
    - Executemany with one parameter dict per row: Python-side column defaults
      (created_at, updated_at) are applied per row by SQLAlchemy
    - pg_advisory_xact_lock serializes concurrent seeds on PostgreSQL; released
      automatically at commit/rollback. Other dialects rely on the upserts alone
"""

import logging
from typing import Sequence

from sqlalchemy import Table, func, select, text
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.domain_types import PermissionName, RoleName
from rolegate.core.errors import DatabaseError
from rolegate.core.repository_protocols import RoleGrants
from rolegate.core.seed_catalog import PermissionDefinition, RoleDefinition
from rolegate.models.permission import Permission
from rolegate.models.role import Role
from rolegate.models.role_permission import RolePermission

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class SqlAlchemyRbacRepository:
    """Role/permission store over an AsyncSession.

    Satisfies RoleGrantReader and SeedWriter (core/repository_protocols.py).
    """

    def __init__(self, db: AsyncSession):
        self._db = db

    @property
    def dialect_name(self) -> str:
        return self._db.get_bind().dialect.name

    # ─── Reads ──────────────────────────────────────────────────

    async def find_role_grants(self, role_name: RoleName) -> RoleGrants | None:
        """Role + enablement + direct permission names in one join query."""
        stmt = (
            select(Role.id, Role.is_enabled, Permission.name)
            .select_from(Role)
            .outerjoin(RolePermission, RolePermission.role_id == Role.id)
            .outerjoin(Permission, Permission.id == RolePermission.permission_id)
            .where(Role.name == role_name)
        )
        rows = (await self._db.execute(stmt)).all()
        if not rows:
            return None
        role_id, is_enabled, _ = rows[0]
        return RoleGrants(
            role_id=role_id,
            role_name=role_name,
            is_enabled=is_enabled,
            permission_names=frozenset(
                name for _, _, name in rows if name is not None
            ),
        )

    async def list_role_permissions(self, role_name: RoleName) -> list[Permission]:
        """Permission rows associated with the named role, catalog order."""
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(Role.name == role_name)
            .order_by(Permission.sort_order.desc(), Permission.id)
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def role_has_permission(
        self, role_name: RoleName, permission_name: PermissionName,
    ) -> bool:
        """Direct association check — no manage expansion, no enablement check."""
        stmt = (
            select(func.count())
            .select_from(RolePermission)
            .join(Role, Role.id == RolePermission.role_id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(Role.name == role_name, Permission.name == permission_name)
        )
        return (await self._db.execute(stmt)).scalar_one() > 0

    async def count_system_permissions(self) -> int:
        stmt = (
            select(func.count())
            .select_from(Permission)
            .where(Permission.is_system == 1)
        )
        return (await self._db.execute(stmt)).scalar_one()

    # ─── Seed writes ────────────────────────────────────────────

    async def acquire_seed_lock(self, key: int) -> None:
        """Transaction-scoped advisory lock (PostgreSQL only)."""
        if self.dialect_name != "postgresql":
            return
        await self._db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"), {"key": key},
        )

    async def upsert_permissions(
        self, definitions: Sequence[PermissionDefinition],
    ) -> dict[str, int]:
        """Insert missing permissions; return name → id for every definition."""
        rows = [
            {
                "name": d.name,
                "resource": d.resource.value,
                "action": d.action.value,
                "display_name": d.display_name,
                "description": d.description,
                "is_system": 1,
                "permission_group": d.group,
                "sort_order": 0,
            }
            for d in definitions
        ]
        await self._insert_missing(Permission.__table__, rows, ["name"])
        return await self._ids_by_name(Permission, [d.name for d in definitions])

    async def upsert_roles(
        self, definitions: Sequence[RoleDefinition],
    ) -> dict[str, int]:
        """Insert missing roles; return name → id for every definition."""
        rows = [
            {
                "name": d.name,
                "display_name": d.display_name,
                "description": d.description,
                "is_system": 1,
                "sort_order": d.sort_order,
                "is_enabled": 1,
            }
            for d in definitions
        ]
        await self._insert_missing(Role.__table__, rows, ["name"])
        return await self._ids_by_name(Role, [d.name for d in definitions])

    async def upsert_role_permissions(
        self, pairs: Sequence[tuple[int, int]],
    ) -> None:
        rows = [
            {"role_id": role_id, "permission_id": permission_id}
            for role_id, permission_id in pairs
        ]
        await self._insert_missing(
            RolePermission.__table__, rows, ["role_id", "permission_id"],
        )

    # ─── Helpers ────────────────────────────────────────────────

    async def _insert_missing(
        self, table: Table, rows: list[dict], conflict_columns: list[str],
    ) -> None:
        if not rows:
            return
        insert = _UPSERT_INSERTS.get(self.dialect_name)
        if insert is None:
            raise DatabaseError(
                f"no upsert support for dialect '{self.dialect_name}'", "upsert",
            )
        stmt = insert(table).on_conflict_do_nothing(index_elements=conflict_columns)
        await self._db.execute(stmt, rows)

    async def _ids_by_name(self, model, names: list[str]) -> dict[str, int]:
        result = await self._db.execute(
            select(model.name, model.id).where(model.name.in_(names)),
        )
        return {name: id_ for name, id_ in result.all()}
