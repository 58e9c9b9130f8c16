"""
Taskboard Backend — Task Table Model
=====================================

Same soft-delete lifecycle as projects. Three JSON document columns carry
free-form data: `custom_fields` (object), `tags` (array of strings) and
`metadata` (object).

`metadata` is reserved on declarative classes, so the ORM attribute is `meta`
while the column keeps the name `metadata`; the repositories work on the
table, where it lines up with the entity's `metadata` field.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.models.base import Base, JSONDocument


class TaskRecord(Base):
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Hard-deleting a project removes its tasks with it
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=text("''")
    )

    # Values: todo | in_progress | completed | cancelled
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=text("'todo'")
    )

    assignee_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    custom_fields: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONDocument, nullable=True)
    tags: Mapped[Optional[List[str]]] = mapped_column(JSONDocument, nullable=True)
    meta: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSONDocument, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    __table_args__ = (
        Index("idx_tasks_created_at", created_at.desc()),
        Index("idx_tasks_deleted_at", deleted_at),
        Index("idx_tasks_project_id", project_id),
        Index("idx_tasks_status", status),
    )

    def __repr__(self) -> str:
        return f"<TaskRecord(id={self.id}, title='{self.title}', status='{self.status}')>"
