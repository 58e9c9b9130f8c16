"""
Taskboard Backend — Audit Log Schemas
======================================

AuditLog is write-once, read-many. AuditContext carries who/where for the
action being recorded; route handlers build it from the request.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AuditLog(BaseModel):
    id: Optional[int] = None
    user_id: Optional[int] = None
    action: str
    entity_type: str
    entity_id: int
    entity_data: Dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None


class AuditContext(BaseModel):
    """The actor and request origin attached to every audit record."""

    actor_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
