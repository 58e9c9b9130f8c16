"""
Taskboard Backend — Task Schemas
=================================

What:  The Task entity, request bodies (single, partial, status-only, bulk)
       and the recycle-bin projection.

JSON fields:
    custom_fields: free-form object
    tags:          array of strings
    metadata:      free-form object
    A task created without them reads back with {} / [] / {}.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Task(BaseModel):
    id: Optional[int] = None
    project_id: int
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    assignee_id: Optional[int] = None
    due_date: Optional[datetime] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class TaskRequest(BaseModel):
    """Body of POST /projects/{id}/tasks and one item of a bulk import."""

    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    status: Optional[TaskStatus] = None
    assignee_id: Optional[int] = None
    due_date: Optional[datetime] = None
    custom_fields: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_task(self, project_id: int) -> Task:
        """Builds the entity; a missing status defaults to todo."""
        return Task(
            project_id=project_id,
            title=self.title,
            description=self.description,
            status=self.status or TaskStatus.TODO,
            assignee_id=self.assignee_id,
            due_date=self.due_date,
            custom_fields=self.custom_fields or {},
            tags=self.tags or [],
            metadata=self.metadata or {},
        )


class TaskUpdateRequest(BaseModel):
    """Body of PUT /projects/{id}/tasks/{task_id}; only provided, non-empty fields apply."""

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    assignee_id: Optional[int] = None
    due_date: Optional[datetime] = None
    custom_fields: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None


class TaskStatusUpdate(BaseModel):
    """Body of PATCH /projects/{id}/tasks/{task_id}/status."""

    status: TaskStatus


class BulkImportRequest(BaseModel):
    """
    Body of POST /projects/{id}/tasks/bulk-import.

    The 1..1000 size bound is enforced by TaskService.bulk_import so that the
    rule holds for every caller, not only HTTP clients.
    """

    tasks: List[TaskRequest]


class BulkImportResponse(BaseModel):
    total_tasks: int
    success_count: int
    failure_count: int = 0
    imported_tasks: List[int] = Field(default_factory=list)


class RecycledTask(BaseModel):
    """Read-only projection of a soft-deleted task with denormalized names."""

    id: int
    project_id: int
    project_name: Optional[str] = None
    title: str
    description: str = ""
    status: TaskStatus
    assignee_id: Optional[int] = None
    assignee_username: Optional[str] = None
    due_date: Optional[datetime] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime
