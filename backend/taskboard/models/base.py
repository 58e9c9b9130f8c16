"""
Taskboard Backend — Declarative Base and Shared Column Types
=============================================================

What:  The SQLAlchemy declarative base every table model inherits from, plus
       column types shared across tables.
Why separate from database.py: the repositories import the table models and
       database.py imports the repositories; keeping Base here avoids a cycle.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy table models.

    Alembic reads `Base.metadata` for autogeneration; `Database.create_schema`
    uses it to build tables in development and tests.
    """
    pass


# JSON document column: JSONB on PostgreSQL, JSON text elsewhere (SQLite in tests).
# none_as_null: a Python None is stored as SQL NULL, not the JSON literal 'null'.
JSONDocument = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware current UTC time; the single clock for all timestamps."""
    return datetime.now(timezone.utc)
