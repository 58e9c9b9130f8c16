"""
Taskboard Backend — Execution Context
======================================

What:  One query surface with two execution modes: straight against the
       shared connection pool, or on the connection of an open transaction.
Why:   Repositories are written once against `ExecutionContext`. Whether a
       statement auto-commits or joins a larger unit of work is decided when
       the repository is constructed, never at call time.
How:   `PooledContext` checks out a connection per statement and runs it in a
       short `engine.begin()` block (commit on success, rollback on error,
       connection returned on every exit path). `TransactionContext` runs on
       a connection whose transaction is owned by the coordinator in
       `taskboard.database`.

Error contract:
    Transport failures (lost connection, refused connection, deadline
    expiry) surface as `ConnectivityError`. Everything else (integrity and
    data violations, programming errors) propagates untouched so the repositories
    can classify it. Nothing is retried.

Cancellation:
    Every call is a plain coroutine; cancelling the surrounding asyncio task
    cancels the in-flight driver call. An optional per-statement `timeout`
    (seconds) bounds each call with `asyncio.wait_for`.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterator, List, Optional, TypeVar

from sqlalchemy.engine import CursorResult, Row
from sqlalchemy.exc import DataError, DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.sql.base import Executable

from taskboard.exceptions import ConnectivityError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Params = Optional[Dict[str, Any]]


def is_data_error(exc: BaseException) -> bool:
    """
    True for driver errors caused by the values sent, not by the connection.

    asyncpg rejects unencodable bind values (e.g. an int32 overflow) client
    side with a ValueError subclass, which the SQLAlchemy adapter wraps in
    InterfaceError. The server reports bad values with SQLSTATE class 22.
    """
    if isinstance(exc, DataError):
        return True
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        if isinstance(candidate, ValueError):
            return True
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if isinstance(code, str) and code.startswith("22"):
            return True
    return False


def is_transport_failure(exc: BaseException) -> bool:
    """True for errors that mean storage could not be reached or answered."""
    if is_data_error(exc):
        return False
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError):
        return bool(exc.connection_invalidated)
    # Socket-level failures raised before the driver wraps them (refused, reset)
    return isinstance(exc, OSError)


@contextmanager
def transport_errors(timeout: Optional[float] = None) -> Iterator[None]:
    """Translates transport failures raised inside the block into ConnectivityError."""
    try:
        yield
    except asyncio.TimeoutError as exc:
        logger.error("Database statement exceeded deadline of %ss", timeout)
        raise ConnectivityError(
            "The database did not respond in time. Please try again later.",
            context={"timeout": timeout},
        ) from exc
    except Exception as exc:
        if not is_transport_failure(exc):
            raise
        logger.error("Database connectivity failure: %s", exc)
        raise ConnectivityError(context={"error_type": type(exc).__name__}) from exc


class ExecutionContext(ABC):
    """
    The surface every repository talks to.

    execute    → affected-row count
    query_one  → first row, or None when the statement produced no rows
    query_many → all rows (possibly empty)
    atomic     → a context whose statements share one transaction
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def execute(self, statement: Executable, params: Params = None) -> int:
        return await self._guarded(statement, params, lambda result: result.rowcount)

    async def query_one(self, statement: Executable, params: Params = None) -> Optional[Row]:
        return await self._guarded(statement, params, lambda result: result.first())

    async def query_many(self, statement: Executable, params: Params = None) -> List[Row]:
        return await self._guarded(statement, params, lambda result: list(result.all()))

    async def _guarded(
        self,
        statement: Executable,
        params: Params,
        consume: Callable[[CursorResult], T],
    ) -> T:
        with transport_errors(self.timeout):
            call: Awaitable[T] = self._run(statement, params, consume)
            if self.timeout is None:
                return await call
            return await asyncio.wait_for(call, timeout=self.timeout)

    @abstractmethod
    async def _run(
        self,
        statement: Executable,
        params: Params,
        consume: Callable[[CursorResult], T],
    ) -> T:
        """Executes one statement and hands its result to `consume` before release."""

    @abstractmethod
    def atomic(self) -> "AsyncIterator[TransactionContext]":
        """Async context manager yielding a context bound to one transaction."""


class PooledContext(ExecutionContext):
    """Auto-commit mode: one pooled connection and one short transaction per statement."""

    def __init__(self, engine: AsyncEngine, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.engine = engine

    async def _run(self, statement, params, consume):
        async with self.engine.begin() as connection:
            if params:
                result = await connection.execute(statement, params)
            else:
                result = await connection.execute(statement)
            # Rows must be consumed before the connection goes back to the pool
            return consume(result)

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator["TransactionContext"]:
        with transport_errors(self.timeout):
            async with self.engine.begin() as connection:
                yield TransactionContext(connection, self.timeout)


class TransactionContext(ExecutionContext):
    """Runs statements on the connection of an already-open transaction."""

    def __init__(self, connection: AsyncConnection, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.connection = connection

    async def _run(self, statement, params, consume):
        if params:
            result = await self.connection.execute(statement, params)
        else:
            result = await self.connection.execute(statement)
        return consume(result)

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator["TransactionContext"]:
        # Already inside a transaction: no savepoints, the block simply joins it
        yield self
