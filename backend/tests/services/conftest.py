"""Service test fixtures — async DB, seeded role graph, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session factory
    - db_manager patched so code using it directly shares the test engine
    - The `auth` holder stands in for the authentication layer: whatever it holds
      is placed on request.state.principal before the app sees the request

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the upserts use the sqlite
      ON CONFLICT dialect, the advisory lock is a no-op there
    - ASGI wrapper over app middleware: the module-level app is shared between
      tests and cannot take new middleware once started
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from rolegate.db.base import Base
from rolegate.infrastructure.database import get_db, DatabaseSessionManager
from rolegate.models.permission import Permission
from rolegate.models.role import Role
from rolegate.models.role_permission import RolePermission
from rolegate.services.seed_bootstrapper import SeedBootstrapper
import rolegate.infrastructure.database as db_module
from rolegate.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def session_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the test engine."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
async def seeded(session_manager):
    """Run the startup seed once against the test DB."""
    return await SeedBootstrapper(session_manager).seed()


@pytest.fixture
def make_role(test_db):
    """Factory: insert a role with the given permission names (created on demand)."""

    async def _make(name: str, permissions=(), is_enabled: int = 1) -> Role:
        role = Role(name=name, display_name=name.title(), is_enabled=is_enabled)
        test_db.add(role)
        await test_db.flush()
        for permission_name in permissions:
            result = await test_db.execute(
                select(Permission).where(Permission.name == permission_name),
            )
            permission = result.scalar_one_or_none()
            if permission is None:
                resource, _, action = permission_name.partition(":")
                permission = Permission(
                    name=permission_name, resource=resource,
                    action=action, display_name=permission_name,
                )
                test_db.add(permission)
                await test_db.flush()
            test_db.add(
                RolePermission(role_id=role.id, permission_id=permission.id),
            )
        await test_db.commit()
        return role

    return _make


@pytest.fixture
def auth():
    """Mutable holder for the principal the authentication layer would attach."""
    return {"principal": None}


@pytest.fixture
async def client(test_engine, test_session_factory, session_manager, auth):
    """FastAPI test client with DB dependency overridden and principal injection."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    db_module.db_manager = session_manager

    async def authenticated_app(scope, receive, send):
        if scope["type"] == "http" and auth["principal"] is not None:
            scope.setdefault("state", {})["principal"] = auth["principal"]
        await app(scope, receive, send)

    async with AsyncClient(
        transport=ASGITransport(app=authenticated_app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
