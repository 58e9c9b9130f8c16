"""
Persistence core: execution contexts, entity repositories, the recycle bin
and the audit log.
"""

from taskboard.repositories.audit_log import AuditLogRepository
from taskboard.repositories.context import ExecutionContext, PooledContext, TransactionContext
from taskboard.repositories.projects import ProjectRepository
from taskboard.repositories.recycle_bin import RecycleBinRepository
from taskboard.repositories.tasks import TaskRepository
from taskboard.repositories.users import UserRepository

__all__ = [
    "AuditLogRepository",
    "ExecutionContext",
    "PooledContext",
    "ProjectRepository",
    "RecycleBinRepository",
    "TaskRepository",
    "TransactionContext",
    "UserRepository",
]
