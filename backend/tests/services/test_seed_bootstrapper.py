"""Seed Bootstrapper — idempotence, no-overwrite, and single-transaction rollback.

Invariants:
    - First run inserts the full catalog: 43 permissions, 4 roles, every grant
    - N runs (forced or not) leave the same row set as one run
    - Pre-existing rows are never overwritten
    - A failure mid-run rolls back every write of that run
    - run_startup_seed swallows failures and returns None
    - Concurrent cold starts against one store both succeed without duplicates
"""

import asyncio
import logging

import pytest
from sqlalchemy import func, select

from rolegate.core.seed_catalog import (
    EXPECTED_SYSTEM_PERMISSIONS, ROLE_DEFINITIONS, ROLE_GRANTS,
)
from rolegate.db.base import Base
from rolegate.infrastructure.database import DatabaseSessionManager
from rolegate.infrastructure.rbac_repository import SqlAlchemyRbacRepository
from rolegate.models.permission import Permission
from rolegate.models.role import Role
from rolegate.models.role_permission import RolePermission
from rolegate.services.seed_bootstrapper import SeedBootstrapper, run_startup_seed

TOTAL_GRANTS = sum(len(names) for names in ROLE_GRANTS.values())


async def _row_counts(session_manager) -> tuple[int, int, int]:
    async with session_manager.session() as db:
        counts = []
        for model in (Permission, Role, RolePermission):
            counts.append(
                (await db.execute(select(func.count()).select_from(model))).scalar_one(),
            )
        return tuple(counts)


async def test_first_run_inserts_full_catalog(session_manager):
    """An empty store receives 43 permissions, 4 roles, and every grant."""
    report = await SeedBootstrapper(session_manager).seed()

    assert not report.skipped
    assert report.existing_system_permissions == 0
    assert report.permissions == EXPECTED_SYSTEM_PERMISSIONS == 43
    assert report.roles == len(ROLE_DEFINITIONS) == 4
    assert report.grants == TOTAL_GRANTS
    assert await _row_counts(session_manager) == (43, 4, TOTAL_GRANTS)


async def test_second_run_is_skipped(session_manager):
    """A complete store short-circuits the second run."""
    await SeedBootstrapper(session_manager).seed()
    report = await SeedBootstrapper(session_manager).seed()

    assert report.skipped
    assert report.existing_system_permissions == 43
    assert await _row_counts(session_manager) == (43, 4, TOTAL_GRANTS)


async def test_forced_runs_create_no_duplicates(session_manager):
    """Forced reruns insert nothing new."""
    bootstrapper = SeedBootstrapper(session_manager)
    await bootstrapper.seed()
    for _ in range(3):
        report = await bootstrapper.seed(force=True)
        assert not report.skipped

    assert await _row_counts(session_manager) == (43, 4, TOTAL_GRANTS)


async def test_partial_graph_completed_when_count_below_threshold(session_manager):
    """A store below the expected count is completed without duplicates."""
    await SeedBootstrapper(session_manager).seed()
    async with session_manager.session() as db:
        async with db.begin():
            await db.execute(
                RolePermission.__table__.delete(),
            )
            await db.execute(
                Permission.__table__.delete().where(Permission.name == "content:read"),
            )

    report = await SeedBootstrapper(session_manager).seed()

    assert not report.skipped
    assert report.existing_system_permissions == 42
    assert await _row_counts(session_manager) == (43, 4, TOTAL_GRANTS)


async def test_existing_rows_are_not_overwritten(session_manager, make_role, test_db):
    """A pre-existing disabled teacher stays disabled after the seed."""
    await make_role("teacher", ["question:read"], is_enabled=0)

    await SeedBootstrapper(session_manager).seed()

    grants = await SqlAlchemyRbacRepository(test_db).find_role_grants("teacher")
    assert grants.enabled is False
    # the catalog grants are still added to the pre-existing role
    assert "lecture:manage" in grants.permission_names
    assert await _row_counts(session_manager) == (43, 4, TOTAL_GRANTS)


async def test_seeded_grants_match_catalog(session_manager, test_db):
    """Every seeded role holds exactly its catalog grants."""
    await SeedBootstrapper(session_manager).seed()
    repo = SqlAlchemyRbacRepository(test_db)

    for role_name, names in ROLE_GRANTS.items():
        grants = await repo.find_role_grants(role_name)
        assert grants.enabled
        assert grants.permission_names == frozenset(names)


class _FailingAfterPermissions(SqlAlchemyRbacRepository):
    async def upsert_roles(self, definitions):
        raise RuntimeError("boom")


async def test_failure_rolls_back_whole_run(session_manager):
    """A failure after the permission upsert leaves no rows behind."""
    bootstrapper = SeedBootstrapper(
        session_manager, repository_factory=_FailingAfterPermissions,
    )
    with pytest.raises(RuntimeError):
        await bootstrapper.seed()

    assert await _row_counts(session_manager) == (0, 0, 0)


async def test_expected_count_threshold_is_configurable(session_manager):
    """A higher expected count forces a run that still adds nothing new."""
    await SeedBootstrapper(session_manager).seed()
    report = await SeedBootstrapper(
        session_manager, expected_permissions=100,
    ).seed()

    assert not report.skipped
    assert await _row_counts(session_manager) == (43, 4, TOTAL_GRANTS)


async def test_startup_seed_returns_report(session_manager):
    """The startup hook returns the report of a successful run."""
    report = await run_startup_seed(session_manager)
    assert report is not None
    assert report.roles == 4


async def test_startup_seed_swallows_failure(caplog):
    """The startup hook logs SEED_FAILED once and returns None."""
    class _BrokenSessions:
        def session(self):
            raise RuntimeError("database unreachable")

    with caplog.at_level(logging.ERROR, logger="rolegate.services.seed_bootstrapper"):
        result = await run_startup_seed(_BrokenSessions())

    assert result is None
    failures = [r for r in caplog.records if getattr(r, "error_code", None) == "SEED_FAILED"]
    assert len(failures) == 1
    assert "database unreachable" in failures[0].getMessage()


async def test_concurrent_cold_starts_neither_fail_nor_duplicate(tmp_path):
    """Two processes seeding one empty file-backed store at once both succeed."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'rbac.db'}"
    first = DatabaseSessionManager(url)
    second = DatabaseSessionManager(url)
    async with first.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        reports = await asyncio.gather(
            run_startup_seed(first), run_startup_seed(second),
        )

        assert all(report is not None for report in reports)
        assert await _row_counts(first) == (43, 4, TOTAL_GRANTS)
    finally:
        await first.dispose()
        await second.dispose()
