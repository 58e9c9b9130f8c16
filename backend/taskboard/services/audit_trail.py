"""
Shared helper for writing an audit record inside a service transaction.

The record goes through the transaction's own audit repository, so the write
and its trail commit or roll back together.
"""

from typing import Any, Optional

from taskboard.database import Transaction
from taskboard.schemas.audit import AuditContext


async def record_action(
    tx: Transaction,
    audit: Optional[AuditContext],
    action: str,
    entity_type: str,
    entity_id: int,
    entity_data: Any = None,
) -> None:
    audit = audit or AuditContext()
    await tx.audit_log.log_action(
        user_id=audit.actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_data=entity_data,
        ip_address=audit.ip_address,
        user_agent=audit.user_agent,
    )
