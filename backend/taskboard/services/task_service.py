"""
Taskboard Backend — Task Service
=================================

What:  Task use cases, always scoped to a live project: list (optionally by
       status), get, create, partial update, status update, soft delete and
       bulk import.

Scoping rule:
    A task is only reachable through the project it belongs to. A task id
    under the wrong project, or any task of a deleted project, is reported
    as not found.

Bulk import:
    1. Reject empty or oversized batches before touching storage
    2. Default a missing status to todo
    3. Create every task inside one transaction
    4. Write one `bulk_import` audit record against the project
    Any failure rolls back the whole batch.
"""

import logging
from typing import List, Optional, Tuple, Union

from taskboard.database import Database, RepositorySet
from taskboard.exceptions import NotFoundError, ValidationError
from taskboard.schemas.audit import AuditContext
from taskboard.schemas.common import Pagination, PaginationParams
from taskboard.schemas.project import Project
from taskboard.schemas.task import (
    BulkImportRequest,
    BulkImportResponse,
    Task,
    TaskRequest,
    TaskStatus,
    TaskUpdateRequest,
)
from taskboard.services.audit_trail import record_action

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, max_bulk_import: int = 1000):
        self.max_bulk_import = max_bulk_import

    # ── Scoping helpers ───────────────────────────────────────────────────

    async def _live_project(self, repos: RepositorySet, project_id: int) -> Project:
        return await repos.projects.get_by_id(project_id)

    async def _scoped_task(self, repos: RepositorySet, project_id: int, task_id: int) -> Task:
        await self._live_project(repos, project_id)
        task = await repos.tasks.get_by_id(task_id)
        if task.project_id != project_id:
            raise NotFoundError("task", task_id, context={"project_id": project_id})
        return task

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_tasks(
        self,
        db: Database,
        project_id: int,
        pagination: PaginationParams,
        status: Optional[TaskStatus] = None,
    ) -> Tuple[List[Task], Pagination]:
        await self._live_project(db, project_id)
        if status is not None:
            tasks, total = await db.tasks.get_by_project_and_status(
                project_id, status, pagination.limit, pagination.offset
            )
        else:
            tasks, total = await db.tasks.get_by_project_id(
                project_id, pagination.limit, pagination.offset
            )
        return tasks, Pagination.build(pagination, total)

    async def get_task(self, db: Database, project_id: int, task_id: int) -> Task:
        return await self._scoped_task(db, project_id, task_id)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_task(
        self,
        db: Database,
        project_id: int,
        request: TaskRequest,
        audit: Optional[AuditContext] = None,
    ) -> Task:
        async with db.transaction() as tx:
            await self._live_project(tx, project_id)
            task = await tx.tasks.create(request.to_task(project_id))
            await record_action(tx, audit, "create", "task", task.id, task)
            await tx.commit()

        logger.info("Task %s created in project %s", task.id, project_id)
        return task

    async def update_task(
        self,
        db: Database,
        project_id: int,
        task_id: int,
        request: TaskUpdateRequest,
        audit: Optional[AuditContext] = None,
    ) -> Task:
        """Partial update: fields that are absent, null or empty strings keep their stored value."""
        changes = {
            field: value
            for field, value in request.model_dump(exclude_none=True).items()
            if value != ""
        }

        async with db.transaction() as tx:
            current = await self._scoped_task(tx, project_id, task_id)
            task = await tx.tasks.update(current.model_copy(update=changes))
            await record_action(tx, audit, "update", "task", task.id, task)
            await tx.commit()

        logger.info("Task %s updated (fields=%s)", task_id, sorted(changes))
        return task

    async def update_status(
        self,
        db: Database,
        project_id: int,
        task_id: int,
        status: Union[str, TaskStatus],
        audit: Optional[AuditContext] = None,
    ) -> Task:
        async with db.transaction() as tx:
            await self._scoped_task(tx, project_id, task_id)
            task = await tx.tasks.update_status(task_id, status)
            await record_action(
                tx, audit, "update_status", "task", task_id, {"status": task.status.value}
            )
            await tx.commit()

        logger.info("Task %s status set to %s", task_id, task.status.value)
        return task

    async def delete_task(
        self,
        db: Database,
        project_id: int,
        task_id: int,
        audit: Optional[AuditContext] = None,
    ) -> None:
        async with db.transaction() as tx:
            task = await self._scoped_task(tx, project_id, task_id)
            await tx.tasks.delete(task_id)
            await record_action(tx, audit, "delete", "task", task_id, task)
            await tx.commit()

        logger.info("Task %s moved to recycle bin", task_id)

    async def bulk_import(
        self,
        db: Database,
        project_id: int,
        request: BulkImportRequest,
        audit: Optional[AuditContext] = None,
        max_tasks: Optional[int] = None,
    ) -> BulkImportResponse:
        """`max_tasks` (the deployment setting) can tighten the service cap, never raise it."""
        limit = min(max_tasks or self.max_bulk_import, self.max_bulk_import)
        total = len(request.tasks)
        if total == 0:
            raise ValidationError("At least one task is required for bulk import", field="tasks")
        if total > limit:
            raise ValidationError(
                f"Bulk import accepts at most {limit} tasks",
                field="tasks",
                context={"received": total, "limit": limit},
            )

        async with db.transaction() as tx:
            await self._live_project(tx, project_id)
            created = await tx.tasks.bulk_create(
                [item.to_task(project_id) for item in request.tasks]
            )
            task_ids = [task.id for task in created]
            await record_action(
                tx,
                audit,
                "bulk_import",
                "project",
                project_id,
                {"total_tasks": total, "task_ids": task_ids},
            )
            await tx.commit()

        logger.info("Bulk imported %d tasks into project %s", len(created), project_id)
        return BulkImportResponse(
            total_tasks=total,
            success_count=len(created),
            failure_count=total - len(created),
            imported_tasks=task_ids,
        )


task_service = TaskService()
