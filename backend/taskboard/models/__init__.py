"""Table models. Importing this package registers every table on Base.metadata."""

from taskboard.models.audit_log import AuditLogRecord
from taskboard.models.base import Base, JSONDocument, utcnow
from taskboard.models.project import ProjectRecord
from taskboard.models.task import TaskRecord
from taskboard.models.user import UserRecord

__all__ = [
    "AuditLogRecord",
    "Base",
    "JSONDocument",
    "ProjectRecord",
    "TaskRecord",
    "UserRecord",
    "utcnow",
]
