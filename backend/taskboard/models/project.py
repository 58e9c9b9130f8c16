"""
Taskboard Backend — Project Table Model
========================================

Soft-deletable: `deleted_at IS NULL` means the project is live. A non-null
stamp moves it into the recycle bin, where it can be restored or hard-deleted.

Indexes:
    - created_at DESC: normal listings (newest first)
    - deleted_at: recycle bin listings and the live-row predicate
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.models.base import Base


class ProjectRecord(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # 1-100 characters, enforced by the request schema and the repository
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=text("''")
    )

    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

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
        Index("idx_projects_created_at", created_at.desc()),
        Index("idx_projects_deleted_at", deleted_at),
        Index("idx_projects_owner_id", owner_id),
    )

    def __repr__(self) -> str:
        return f"<ProjectRecord(id={self.id}, name='{self.name}', deleted_at={self.deleted_at})>"
