"""RBAC Repository — read queries against the SQLite schema.

Invariants:
    - find_role_grants is a single statement, including for roles with no grants
    - role_has_permission checks direct associations only
    - list_role_permissions returns only the named role's permissions
"""

import pytest
from sqlalchemy import event

from rolegate.infrastructure.rbac_repository import SqlAlchemyRbacRepository


@pytest.fixture
def repo(test_db):
    return SqlAlchemyRbacRepository(test_db)


@pytest.fixture
def statements(test_engine):
    """SQL statements sent to the test engine while the test runs."""
    captured: list[str] = []

    def _capture(conn, cursor, statement, parameters, context, executemany):
        captured.append(statement)

    event.listen(test_engine.sync_engine, "before_cursor_execute", _capture)
    yield captured
    event.remove(test_engine.sync_engine, "before_cursor_execute", _capture)


async def test_find_role_grants_single_query(repo, make_role, statements):
    """Role, enablement, and permission names come back from one SELECT."""
    await make_role("editor", ["content:read", "content:update"])
    statements.clear()

    grants = await repo.find_role_grants("editor")

    selects = [s for s in statements if s.lstrip().upper().startswith("SELECT")]
    assert len(selects) == 1
    assert grants.permission_names == frozenset({"content:read", "content:update"})
    assert grants.enabled


async def test_find_role_grants_role_without_permissions(repo, make_role):
    """A role with zero associations still yields RoleGrants with an empty set."""
    await make_role("empty")
    grants = await repo.find_role_grants("empty")
    assert grants is not None
    assert grants.permission_names == frozenset()


async def test_find_role_grants_unknown_role(repo):
    """An unknown role yields None, not an empty RoleGrants."""
    assert await repo.find_role_grants("ghost") is None


async def test_find_role_grants_reports_disabled_flag(repo, make_role):
    """is_enabled is passed through so the resolver can veto the role."""
    await make_role("legacy", ["content:read"], is_enabled=0)
    grants = await repo.find_role_grants("legacy")
    assert grants.is_enabled == 0
    assert not grants.enabled
    assert grants.permission_names == frozenset({"content:read"})


async def test_role_has_permission_is_direct_only(repo, make_role):
    """manage is not expanded and unknown roles hold nothing."""
    await make_role("user-admin", ["user:manage"])
    assert await repo.role_has_permission("user-admin", "user:manage")
    assert not await repo.role_has_permission("user-admin", "user:read")
    assert not await repo.role_has_permission("ghost", "user:manage")


async def test_list_role_permissions(repo, make_role):
    """Listing returns the named role's rows only; unknown role lists nothing."""
    await make_role("editor", ["content:read", "content:update"])
    await make_role("viewer", ["lecture:read"])

    names = [p.name for p in await repo.list_role_permissions("editor")]

    assert sorted(names) == ["content:read", "content:update"]
    assert await repo.list_role_permissions("ghost") == []


async def test_count_system_permissions(repo, seeded, make_role):
    """Only seeded (is_system=1) permissions are counted."""
    await make_role("custom", ["custom:read"])
    assert await repo.count_system_permissions() == 43


async def test_seed_lock_is_noop_on_sqlite(repo, statements):
    """The advisory lock issues no SQL outside PostgreSQL."""
    await repo.acquire_seed_lock(1)
    assert statements == []
