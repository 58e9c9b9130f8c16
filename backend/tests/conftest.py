"""
Taskboard Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Repository and API tests run against a real SQLite database (through
       aiosqlite) created fresh in each test's tmp_path. Service tests use a
       mocked Database whose transaction() yields a mocked Transaction.

Fixture Hierarchy (all function-scoped):
    ├── database:     Database on a fresh SQLite file with all tables created
    │   ├── owner:    a persisted user
    │   │   └── project: a persisted live project owned by `owner`
    │   └── test_client: HTTPX AsyncClient over an app serving `database`
    └── mock_db:      MagicMock Database; `mock_db.tx` is the mocked Transaction
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings BEFORE any taskboard imports so the module-level app
# never points at a real PostgreSQL server
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./taskboard_test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from taskboard.database import Database  # noqa: E402
from taskboard.schemas.project import Project  # noqa: E402
from taskboard.schemas.user import User  # noqa: E402

REPOSITORY_NAMES = ("users", "projects", "tasks", "recycle_bin", "audit_log")


# ══════════════════════════════════════════════════════════════════════════
# Real-database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """A Database on a throwaway SQLite file; disposed after the test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'taskboard.db'}")
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def owner(database):
    return await database.users.create(User(username="alice", password_hash="hashed-secret"))


@pytest_asyncio.fixture
async def project(database, owner):
    return await database.projects.create(
        Project(name="Alpha", description="x", owner_id=owner.id)
    )


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to an app that serves `database`.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from taskboard.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Mocked Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db():
    """
    A Database stand-in for service unit tests.

    Pooled repositories live on the mock itself; repositories used inside
    `async with db.transaction() as tx` live on `mock_db.tx`.

    Usage:
        mock_db.tx.projects.get_by_id.return_value = project
        await project_service.delete_project(mock_db, 1)
        mock_db.tx.commit.assert_awaited_once()
    """
    db = MagicMock()
    tx = MagicMock()
    for name in REPOSITORY_NAMES:
        setattr(db, name, AsyncMock())
        setattr(tx, name, AsyncMock())
    tx.commit = AsyncMock()
    tx.rollback = AsyncMock()

    @asynccontextmanager
    async def transaction():
        yield tx

    db.transaction = MagicMock(side_effect=transaction)
    db.tx = tx
    return db
