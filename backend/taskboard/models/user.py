"""
Taskboard Backend — User Table Model
=====================================

Users are hard-deleted only; there is no recycle bin for them.
`password_hash` is stored as given: hashing happens in the auth layer.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.models.base import Base


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Unique index backs the Conflict error on duplicate registration
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Values: 'admin' | 'user'
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=text("'user'")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, username='{self.username}', role='{self.role}')>"
