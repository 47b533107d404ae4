"""Seed Bootstrapper — idempotent startup seed of the role/permission graph.

Invariants:
    - Whole run executes in ONE transaction: any error rolls back every write of the run
    - Rows are inserted if absent and never overwritten
    - Running N times yields the same row set as running once
    - Skips entirely when system permissions already meet the expected count,
      unless force=True
    - run_startup_seed never raises: failures are logged and the process starts
      (fail-secure: missing grants can only deny)

Design Decisions:
    - Count-based short-circuit kept for compatibility with existing deployments.
      It misses partially seeded graphs whose permission count is already complete;
      force=True is the escape hatch (ADR: flagged, not replaced)
    - Advisory lock + ON CONFLICT DO NOTHING: concurrent cold starts serialize on
      PostgreSQL and never fail on duplicate inserts anywhere
    - Repository built per run from the session: no long-lived session state
"""

import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Callable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.errors import SeedError
from rolegate.core.repository_protocols import SeedWriter
from rolegate.core.seed_catalog import (
    DEFAULT_SEED_LOCK_KEY, EXPECTED_SYSTEM_PERMISSIONS,
    PERMISSION_DEFINITIONS, ROLE_DEFINITIONS, ROLE_GRANTS, grant_pairs,
)
from rolegate.infrastructure.rbac_repository import SqlAlchemyRbacRepository

logger = logging.getLogger(__name__)


class SessionProvider(Protocol):
    """Anything exposing DatabaseSessionManager.session()."""
    def session(self) -> AbstractAsyncContextManager[AsyncSession]: ...


@dataclass(frozen=True)
class SeedReport:
    """Outcome of one seed run."""
    skipped: bool
    existing_system_permissions: int
    permissions: int = 0
    roles: int = 0
    grants: int = 0


class SeedBootstrapper:
    """Ensures the baseline roles, permissions, and grants exist."""

    def __init__(
        self,
        sessions: SessionProvider,
        expected_permissions: int = EXPECTED_SYSTEM_PERMISSIONS,
        lock_key: int = DEFAULT_SEED_LOCK_KEY,
        repository_factory: Callable[[AsyncSession], SeedWriter] = SqlAlchemyRbacRepository,
    ):
        self._sessions = sessions
        self._expected_permissions = expected_permissions
        self._lock_key = lock_key
        self._repository_factory = repository_factory

    async def seed(self, force: bool = False) -> SeedReport:
        """Run the seed inside a single transaction."""
        logger.info("Seeding initial RBAC data")
        async with self._sessions.session() as db:
            async with db.begin():
                report = await self._seed(self._repository_factory(db), force)
        if not report.skipped:
            logger.info(
                "RBAC initial data seeded",
                extra={
                    "seed_permissions": report.permissions,
                    "seed_roles": report.roles,
                    "seed_grants": report.grants,
                },
            )
        return report

    async def _seed(self, repo: SeedWriter, force: bool) -> SeedReport:
        await repo.acquire_seed_lock(self._lock_key)

        existing = await repo.count_system_permissions()
        if not force and existing >= self._expected_permissions:
            logger.info(
                f"RBAC data already present ({existing} system permissions), skipping seed",
            )
            return SeedReport(skipped=True, existing_system_permissions=existing)
        logger.info(f"Found {existing} system permissions, proceeding with seed")

        permission_ids = await repo.upsert_permissions(PERMISSION_DEFINITIONS)
        logger.info(f"Ensured {len(permission_ids)} permissions exist")

        role_ids = await repo.upsert_roles(ROLE_DEFINITIONS)
        logger.info(f"Ensured {len(role_ids)} roles exist")

        pairs = grant_pairs(ROLE_GRANTS, role_ids, permission_ids)
        await repo.upsert_role_permissions(pairs)
        logger.info(f"Ensured {len(pairs)} role grants exist")

        return SeedReport(
            skipped=False,
            existing_system_permissions=existing,
            permissions=len(permission_ids),
            roles=len(role_ids),
            grants=len(pairs),
        )


async def run_startup_seed(
    sessions: SessionProvider,
    expected_permissions: int = EXPECTED_SYSTEM_PERMISSIONS,
    lock_key: int = DEFAULT_SEED_LOCK_KEY,
) -> SeedReport | None:
    """Startup hook entry point. Logs and swallows any seed failure."""
    bootstrapper = SeedBootstrapper(
        sessions, expected_permissions=expected_permissions, lock_key=lock_key,
    )
    try:
        return await bootstrapper.seed()
    except Exception as e:
        error = SeedError(str(e))
        logger.error(
            error.message, extra={"error_code": error.code}, exc_info=True,
        )
        return None
