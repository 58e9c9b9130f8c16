"""
Taskboard Backend — System Audit Log Table Model
=================================================

Append-only: rows are inserted by AuditLogRepository.log_action and never
updated or deleted. `user_id` is deliberately not a foreign key so the trail
survives hard deletion of the acting user.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.models.base import Base, JSONDocument


class AuditLogRecord(Base):
    __tablename__ = "system_audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    entity_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONDocument, nullable=True)

    # IPv6 addresses fit in 45 characters
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        Index("idx_system_audit_log_created_at", created_at.desc()),
        Index("idx_system_audit_log_entity", entity_type, entity_id),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLogRecord(id={self.id}, action='{self.action}', "
            f"entity={self.entity_type}:{self.entity_id})>"
        )
