"""
Taskboard Backend — Audit Log
==============================

Append-only record of mutating actions. Each entry stores who acted, what
was done to which entity, a JSON snapshot of the entity and where the
request came from. There is no update or delete.

Snapshot normalization:
    pydantic models and other values are converted to plain JSON; a value
    that is not an object is wrapped as {"data": value}. Empty IP addresses
    and user agents are stored as NULL.
"""

from collections.abc import Mapping
from typing import Any, List, Optional, Tuple

from pydantic_core import PydanticSerializationError, to_jsonable_python

from taskboard.exceptions import ValidationError
from taskboard.models import AuditLogRecord
from taskboard.repositories.base import TableRepository
from taskboard.schemas.audit import AuditLog


def snapshot(entity_data: Any) -> dict:
    try:
        data = to_jsonable_python(entity_data)
    except PydanticSerializationError as exc:
        raise ValidationError(
            "Audit snapshot cannot be serialized", field="entity_data"
        ) from exc
    if not isinstance(data, Mapping):
        return {"data": data}
    return dict(data)


class AuditLogRepository(TableRepository[AuditLog]):
    resource = "audit_log"
    table = AuditLogRecord.__table__
    entity = AuditLog
    writable = (
        "user_id",
        "action",
        "entity_type",
        "entity_id",
        "entity_data",
        "ip_address",
        "user_agent",
    )
    required = ("action", "entity_type", "entity_id")
    json_fields = {"entity_data": dict}
    timestamps = ("created_at",)

    async def log_action(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: int,
        entity_data: Any = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_data=snapshot(entity_data),
            ip_address=ip_address or None,
            user_agent=user_agent[:500] if user_agent else None,
        )
        return await self._insert(entry, action="log_action")

    async def list_audit_logs(self, limit: int, offset: int) -> Tuple[List[AuditLog], int]:
        return await self._page([], limit, offset, action="list")
