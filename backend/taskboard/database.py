"""
Taskboard Backend — Database and Transaction Coordinator
=========================================================

What:  Owns the async SQLAlchemy engine and hands out repositories in two
       modes: pooled (each statement auto-commits) and transactional (every
       repository shares one connection and one transaction).
Who:   Created once by the app factory and stored on `app.state.database`;
       services receive it as their first argument.

Connection Pooling Strategy:
    pool_size     = max idle connections (kept open between requests)
    max_overflow  = max open − max idle (temporary connections for spikes)
    pool_recycle  = max connection lifetime (seconds)
    pool_pre_ping validates a connection before each checkout
    SQLite (tests) uses SQLAlchemy's default pool and ignores these settings.

Transaction lifecycle:
    async with database.transaction() as tx:
        project = await tx.projects.create(...)
        await tx.audit_log.log_action(...)
        await tx.commit()

    - commit() or rollback() may be called once; a second call is an error
    - leaving the block without either rolls back (and logs a warning)
    - leaving the block with an exception rolls back and re-raises
    - the connection goes back to the pool on every exit path
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from taskboard.config import Settings
from taskboard.models import Base
from taskboard.repositories import (
    AuditLogRepository,
    ExecutionContext,
    PooledContext,
    ProjectRepository,
    RecycleBinRepository,
    TaskRepository,
    TransactionContext,
    UserRepository,
)
from taskboard.repositories.context import transport_errors

logger = logging.getLogger(__name__)


class RepositorySet:
    """The full set of repositories bound to one execution context."""

    def __init__(self, context: ExecutionContext):
        self.context = context
        self.users = UserRepository(context)
        self.projects = ProjectRepository(context)
        self.tasks = TaskRepository(context)
        self.recycle_bin = RecycleBinRepository(context)
        self.audit_log = AuditLogRepository(context)


class Transaction(RepositorySet):
    """Repositories bound to one open transaction, plus commit/rollback."""

    def __init__(self, connection: AsyncConnection, timeout: Optional[float] = None):
        super().__init__(TransactionContext(connection, timeout))
        self.connection = connection
        self.timeout = timeout
        self.outcome: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.outcome is None

    def _finish(self, outcome: str) -> None:
        if self.outcome is not None:
            raise RuntimeError(f"Cannot {outcome}: transaction already {self.outcome}")
        self.outcome = outcome

    async def commit(self) -> None:
        self._finish("committed")
        with transport_errors(self.timeout):
            await self.connection.commit()

    async def rollback(self) -> None:
        self._finish("rolled back")
        with transport_errors(self.timeout):
            await self.connection.rollback()


class Database(RepositorySet):
    """
    The pooled repository set plus the transaction coordinator.

    Args:
        url:               SQLAlchemy async URL (postgresql+asyncpg://… or sqlite+aiosqlite://…)
        max_open_conns:    Upper bound on simultaneously open connections
        max_idle_conns:    Connections kept in the pool
        conn_max_lifetime: Seconds before a pooled connection is recycled
        pool_pre_ping:     Validate connections on checkout
        statement_timeout: Optional per-statement deadline in seconds
        echo:              Log every SQL statement (development only)
    """

    def __init__(
        self,
        url: str,
        max_open_conns: int = 25,
        max_idle_conns: int = 25,
        conn_max_lifetime: int = 300,
        pool_pre_ping: bool = True,
        statement_timeout: Optional[float] = None,
        echo: bool = False,
    ):
        engine_options = {"echo": echo}
        if make_url(url).get_backend_name() != "sqlite":
            engine_options.update(
                pool_size=max_idle_conns,
                max_overflow=max(max_open_conns - max_idle_conns, 0),
                pool_recycle=conn_max_lifetime,
                pool_pre_ping=pool_pre_ping,
            )
        self.engine: AsyncEngine = create_async_engine(url, **engine_options)
        self.statement_timeout = statement_timeout
        super().__init__(PooledContext(self.engine, statement_timeout))

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_dsn,
            max_open_conns=settings.db_max_open_conns,
            max_idle_conns=settings.db_max_idle_conns,
            conn_max_lifetime=settings.db_conn_max_lifetime,
            pool_pre_ping=settings.db_pool_pre_ping,
            statement_timeout=settings.db_statement_timeout,
            echo=settings.log_level == "DEBUG",
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        with transport_errors(self.statement_timeout):
            connection = await self.engine.connect()
        try:
            with transport_errors(self.statement_timeout):
                await connection.begin()
            tx = Transaction(connection, self.statement_timeout)
            try:
                yield tx
            except BaseException:
                if tx.is_active:
                    await tx.rollback()
                raise
            if tx.is_active:
                logger.warning("Transaction finished without commit or rollback; rolling back")
                await tx.rollback()
        finally:
            await connection.close()

    async def ping(self) -> bool:
        """Round-trips `SELECT 1`. Raises ConnectivityError when storage is unreachable."""
        await self.context.query_one(text("SELECT 1"))
        return True

    async def create_schema(self) -> None:
        """Creates all tables; development and tests only (production uses Alembic)."""
        with transport_errors(self.statement_timeout):
            async with self.engine.begin() as connection:
                await connection.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes every pooled connection (application shutdown)."""
        await self.engine.dispose()
