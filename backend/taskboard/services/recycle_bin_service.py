"""
Taskboard Backend — Recycle Bin Service
========================================

What:  Listing, restore and permanent deletion of recycled projects and
       tasks, plus read access to the audit trail.

Restores and hard deletes are audited like any other mutation; a hard
delete records the last known state of the row, read inside the same
transaction before it is removed.
"""

import logging
from typing import List, Optional, Tuple

from taskboard.database import Database
from taskboard.schemas.audit import AuditContext, AuditLog
from taskboard.schemas.common import Pagination, PaginationParams
from taskboard.schemas.project import Project, RecycledProject
from taskboard.schemas.task import RecycledTask, Task
from taskboard.services.audit_trail import record_action

logger = logging.getLogger(__name__)


class RecycleBinService:
    # ── Projects ──────────────────────────────────────────────────────────

    async def list_projects(
        self, db: Database, pagination: PaginationParams
    ) -> Tuple[List[RecycledProject], Pagination]:
        items, total = await db.recycle_bin.list_recycled_projects(
            pagination.limit, pagination.offset
        )
        return items, Pagination.build(pagination, total)

    async def restore_project(
        self, db: Database, project_id: int, audit: Optional[AuditContext] = None
    ) -> Project:
        async with db.transaction() as tx:
            await tx.recycle_bin.restore_project(project_id)
            project = await tx.projects.get_by_id(project_id)
            await record_action(tx, audit, "restore", "project", project_id, project)
            await tx.commit()

        logger.info("Project %s restored from recycle bin", project_id)
        return project

    async def hard_delete_project(
        self, db: Database, project_id: int, audit: Optional[AuditContext] = None
    ) -> None:
        async with db.transaction() as tx:
            project = await tx.recycle_bin.get_recycled_project(project_id)
            await tx.recycle_bin.hard_delete_project(project_id)
            await record_action(tx, audit, "hard_delete", "project", project_id, project)
            await tx.commit()

        logger.info("Project %s permanently deleted", project_id)

    # ── Tasks ─────────────────────────────────────────────────────────────

    async def list_tasks(
        self, db: Database, pagination: PaginationParams
    ) -> Tuple[List[RecycledTask], Pagination]:
        items, total = await db.recycle_bin.list_recycled_tasks(
            pagination.limit, pagination.offset
        )
        return items, Pagination.build(pagination, total)

    async def restore_task(
        self, db: Database, task_id: int, audit: Optional[AuditContext] = None
    ) -> Task:
        async with db.transaction() as tx:
            await tx.recycle_bin.restore_task(task_id)
            task = await tx.tasks.get_by_id(task_id)
            await record_action(tx, audit, "restore", "task", task_id, task)
            await tx.commit()

        logger.info("Task %s restored from recycle bin", task_id)
        return task

    async def hard_delete_task(
        self, db: Database, task_id: int, audit: Optional[AuditContext] = None
    ) -> None:
        async with db.transaction() as tx:
            task = await tx.recycle_bin.get_recycled_task(task_id)
            await tx.recycle_bin.hard_delete_task(task_id)
            await record_action(tx, audit, "hard_delete", "task", task_id, task)
            await tx.commit()

        logger.info("Task %s permanently deleted", task_id)

    # ── Audit trail ───────────────────────────────────────────────────────

    async def list_audit_logs(
        self, db: Database, pagination: PaginationParams
    ) -> Tuple[List[AuditLog], Pagination]:
        entries, total = await db.audit_log.list_audit_logs(pagination.limit, pagination.offset)
        return entries, Pagination.build(pagination, total)


recycle_bin_service = RecycleBinService()
