"""
Taskboard Backend — Generic Repository
=======================================

What:  Table-driven CRUD shared by the user, project, task and audit-log
       repositories.
How:   Each concrete repository declares its table, its pydantic entity, the
       fields it may write, the fields that must be present and the JSON
       document fields (with the factory for their empty value). Statements
       are built with SQLAlchemy Core and run through an ExecutionContext, so
       the same repository works pooled or inside a transaction.

Visibility:
    `SoftDeleteRepository` adds the predicate `deleted_at IS NULL` to every
    read and update. Soft-deleted rows are reachable only through the
    recycle bin.

Error translation (see `storage_errors`):
    unique violation                 → ConflictError
    other integrity failure          → ValidationError
    bad value (SQLSTATE 22, bind)    → ValidationError
    transport / other SQL failure    → ConnectivityError with {"operation": ...}
    zero rows on a conditional write → NotFoundError (raised by the caller)
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from taskboard.exceptions import (
    ConflictError,
    ConnectivityError,
    NotFoundError,
    TaskboardError,
    ValidationError,
)
from taskboard.models.base import utcnow
from taskboard.repositories.codec import EmptyFactory, decode_document, encode_document
from taskboard.repositories.context import ExecutionContext, is_data_error

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=BaseModel)

_UNIQUE_SQLSTATE = "23505"
_SQLITE_UNIQUE_ERRORS = {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}


def is_unique_violation(exc: IntegrityError) -> bool:
    """Checks the driver's error code; asyncpg exposes SQLSTATE, sqlite3 an error name."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code == _UNIQUE_SQLSTATE:
            return True
        if getattr(candidate, "sqlite_errorname", None) in _SQLITE_UNIQUE_ERRORS:
            return True
    return False


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Classifies storage failures raised inside the block for `operation` (entity.action)."""
    try:
        yield
    except ConnectivityError as exc:
        exc.context.setdefault("operation", operation)
        logger.error("Storage unreachable during %s", operation)
        raise
    except TaskboardError:
        raise
    except IntegrityError as exc:
        if is_unique_violation(exc):
            logger.info("Uniqueness conflict during %s", operation)
            raise ConflictError(
                "A record with the same unique value already exists",
                context={"operation": operation},
            ) from exc
        logger.info("Integrity failure during %s: %s", operation, exc.orig)
        raise ValidationError(
            "The record violates a data integrity rule",
            context={"operation": operation},
        ) from exc
    except DBAPIError as exc:
        if not is_data_error(exc):
            logger.error("Storage failure during %s: %s", operation, exc, exc_info=True)
            raise ConnectivityError(context={"operation": operation}) from exc
        logger.info("Rejected value during %s: %s", operation, exc.orig)
        raise ValidationError(
            "A value is out of range or malformed for its column",
            context={"operation": operation},
        ) from exc
    except SQLAlchemyError as exc:
        logger.error("Storage failure during %s: %s", operation, exc, exc_info=True)
        raise ConnectivityError(context={"operation": operation}) from exc


class TableRepository(Generic[EntityT]):
    """Row mapping, insert and paging helpers for one table."""

    resource: str = "record"
    table: Table
    entity: Type[EntityT]

    # Fields written on create/update, in entity attribute names
    writable: Tuple[str, ...] = ()
    # Fields that must be present (non-None, non-blank) before a write
    required: Tuple[str, ...] = ()
    # JSON document fields and the factory for their empty value
    json_fields: Dict[str, EmptyFactory] = {}
    # Timestamp columns stamped on insert
    timestamps: Tuple[str, ...] = ("created_at", "updated_at")

    def __init__(self, context: ExecutionContext):
        self.context = context

    # ── Row mapping ───────────────────────────────────────────────────────

    def _values(self, entity: BaseModel, fields: Sequence[str]) -> Dict[Any, Any]:
        values: Dict[Any, Any] = {}
        for field in fields:
            value = getattr(entity, field)
            if field in self.json_fields:
                value = encode_document(value, field, self.json_fields[field])
            elif isinstance(value, Enum):
                value = value.value
            values[self.table.c[field]] = value
        return values

    def _from_row(self, row: Row) -> EntityT:
        data = {}
        for column in self.table.c:
            value = row._mapping[column]
            if column.name in self.json_fields:
                value = decode_document(value, column.name, self.json_fields[column.name])
            data[column.name] = value
        try:
            return self.entity.model_validate(data)
        except SchemaError as exc:
            raise ValidationError(
                f"Stored {self.resource} does not match its schema",
                context={"errors": exc.errors(include_url=False)},
            ) from exc

    def _check_required(self, entity: BaseModel) -> None:
        for field in self.required:
            value = getattr(entity, field, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Field '{field}' is required", field=field)

    @staticmethod
    def _check_window(limit: int, offset: int) -> None:
        if limit < 0 or offset < 0:
            raise ValidationError(
                "limit and offset must not be negative",
                context={"limit": limit, "offset": offset},
            )

    # ── Statements ────────────────────────────────────────────────────────

    async def _insert(self, entity: BaseModel, action: str = "create") -> EntityT:
        self._check_required(entity)
        values = self._values(entity, self.writable)
        now = utcnow()
        for name in self.timestamps:
            values[self.table.c[name]] = now
        statement = insert(self.table).values(values).returning(*self.table.c)
        with storage_errors(f"{self.resource}.{action}"):
            row = await self.context.query_one(statement)
        return self._from_row(row)

    async def _page(
        self,
        criteria: Sequence[ColumnElement[bool]],
        limit: int,
        offset: int,
        action: str = "list",
    ) -> Tuple[List[EntityT], int]:
        """
        Count query, then page query, both under the same criteria.

        The total reflects the count at call time; a concurrent write between
        the two statements may make it drift from the page contents.
        """
        self._check_window(limit, offset)
        count_statement = select(func.count()).select_from(self.table).where(*criteria)
        page_statement = (
            select(self.table)
            .where(*criteria)
            .order_by(self.table.c.created_at.desc(), self.table.c.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with storage_errors(f"{self.resource}.{action}"):
            count_row = await self.context.query_one(count_statement)
            rows = await self.context.query_many(page_statement)
        total = count_row[0] if count_row is not None else 0
        return [self._from_row(row) for row in rows], total


class Repository(TableRepository[EntityT]):
    """CRUD over a table whose rows are hard-deleted."""

    def _visible(self) -> List[ColumnElement[bool]]:
        return []

    async def create(self, entity: EntityT) -> EntityT:
        """Inserts the entity; id and timestamps come back populated."""
        return await self._insert(entity)

    async def get_by_id(self, entity_id: int) -> EntityT:
        statement = select(self.table).where(self.table.c.id == entity_id, *self._visible())
        with storage_errors(f"{self.resource}.get"):
            row = await self.context.query_one(statement)
        if row is None:
            raise NotFoundError(self.resource, entity_id)
        return self._from_row(row)

    async def update(self, entity: EntityT) -> EntityT:
        """
        Full replace of the writable fields; `updated_at` is refreshed.

        Raises NotFoundError when the row is absent (or soft-deleted, for
        soft-delete tables).
        """
        entity_id: Optional[int] = getattr(entity, "id", None)
        if entity_id is None:
            raise ValidationError(f"Cannot update a {self.resource} without an id", field="id")
        self._check_required(entity)
        values = self._values(entity, self.writable)
        values[self.table.c.updated_at] = utcnow()
        statement = (
            update(self.table)
            .where(self.table.c.id == entity_id, *self._visible())
            .values(values)
            .returning(*self.table.c)
        )
        with storage_errors(f"{self.resource}.update"):
            row = await self.context.query_one(statement)
        if row is None:
            raise NotFoundError(self.resource, entity_id)
        return self._from_row(row)

    async def delete(self, entity_id: int) -> None:
        statement = delete(self.table).where(self.table.c.id == entity_id)
        with storage_errors(f"{self.resource}.delete"):
            affected = await self.context.execute(statement)
        if affected == 0:
            raise NotFoundError(self.resource, entity_id)

    async def list(self, limit: int, offset: int) -> Tuple[List[EntityT], int]:
        """Visible rows, newest first, plus the total count of visible rows."""
        return await self._page(self._visible(), limit, offset)


class SoftDeleteRepository(Repository[EntityT]):
    """Rows carry `deleted_at`; delete stamps it instead of removing the row."""

    def _visible(self) -> List[ColumnElement[bool]]:
        return [self.table.c.deleted_at.is_(None)]

    async def delete(self, entity_id: int) -> None:
        """
        Conditional soft delete: only a live row is stamped. Deleting an
        already-deleted (or missing) row raises NotFoundError. `updated_at`
        is left untouched so a restore brings back the exact pre-delete row.
        """
        statement = (
            update(self.table)
            .where(self.table.c.id == entity_id, self.table.c.deleted_at.is_(None))
            .values({self.table.c.deleted_at: utcnow()})
        )
        with storage_errors(f"{self.resource}.delete"):
            affected = await self.context.execute(statement)
        if affected == 0:
            raise NotFoundError(self.resource, entity_id)
