"""
Taskboard Backend — Recycle Bin
================================

What:  Listing, restoring and permanently deleting soft-deleted projects and
       tasks.
How:   The recycled projections are derived queries: projects are joined to
       their owner's username and carry a correlated count of their deleted
       tasks; tasks are joined to their project's name and assignee's
       username.

Contracts:
    restore_*      only a soft-deleted row can be restored; anything else is
                   NotFoundInRecycleBinError
    hard_delete_*  only a soft-deleted row can be removed; a live row is
                   NotFoundInRecycleBinError and stays untouched

Project cascade:
    restore_project clears the tasks stamped with the project's exact
    `deleted_at` (they left with the project). Tasks deleted on their own
    keep their stamp. hard_delete_project removes every task of the project.
"""

import logging
from typing import Any, Callable, List, Tuple

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.engine import Row

from taskboard.exceptions import NotFoundInRecycleBinError
from taskboard.models import ProjectRecord, TaskRecord, UserRecord
from taskboard.repositories.base import storage_errors
from taskboard.repositories.codec import decode_document
from taskboard.repositories.context import ExecutionContext
from taskboard.schemas.project import RecycledProject
from taskboard.schemas.task import RecycledTask

logger = logging.getLogger(__name__)

projects = ProjectRecord.__table__
tasks = TaskRecord.__table__
users = UserRecord.__table__

_TASK_DOCUMENTS = {"custom_fields": dict, "tags": list, "metadata": dict}


def _recycled_task(row: Row) -> RecycledTask:
    data = dict(row._mapping)
    for field, empty in _TASK_DOCUMENTS.items():
        data[field] = decode_document(data.get(field), field, empty)
    return RecycledTask.model_validate(data)


def _recycled_project(row: Row) -> RecycledProject:
    return RecycledProject.model_validate(dict(row._mapping))


def _recycled_projects_query() -> Select:
    deleted_tasks = (
        select(func.count())
        .select_from(tasks)
        .where(tasks.c.project_id == projects.c.id, tasks.c.deleted_at.is_not(None))
        .scalar_subquery()
    )
    return select(
        projects,
        users.c.username.label("owner_username"),
        deleted_tasks.label("deleted_tasks_count"),
    ).select_from(projects.outerjoin(users, users.c.id == projects.c.owner_id))


def _recycled_tasks_query() -> Select:
    return select(
        tasks,
        projects.c.name.label("project_name"),
        users.c.username.label("assignee_username"),
    ).select_from(
        tasks.outerjoin(projects, projects.c.id == tasks.c.project_id).outerjoin(
            users, users.c.id == tasks.c.assignee_id
        )
    )


class RecycleBinRepository:
    def __init__(self, context: ExecutionContext):
        self.context = context

    async def _listing(
        self,
        table,
        statement,
        mapper: Callable[[Row], Any],
        limit: int,
        offset: int,
        operation: str,
    ) -> Tuple[List[Any], int]:
        count_statement = (
            select(func.count()).select_from(table).where(table.c.deleted_at.is_not(None))
        )
        page_statement = (
            statement.where(table.c.deleted_at.is_not(None))
            .order_by(table.c.deleted_at.desc(), table.c.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with storage_errors(operation):
            count_row = await self.context.query_one(count_statement)
            rows = await self.context.query_many(page_statement)
        total = count_row[0] if count_row is not None else 0
        return [mapper(row) for row in rows], total

    async def _recycled(self, table, statement, mapper, resource: str, entity_id: int):
        statement = statement.where(table.c.id == entity_id, table.c.deleted_at.is_not(None))
        with storage_errors(f"recycle_bin.get_{resource}"):
            row = await self.context.query_one(statement)
        if row is None:
            raise NotFoundInRecycleBinError(resource, entity_id)
        return mapper(row)

    # ── Projects ──────────────────────────────────────────────────────────

    async def list_recycled_projects(self, limit: int, offset: int) -> Tuple[List[RecycledProject], int]:
        return await self._listing(
            projects,
            _recycled_projects_query(),
            _recycled_project,
            limit,
            offset,
            "recycle_bin.list_projects",
        )

    async def get_recycled_project(self, project_id: int) -> RecycledProject:
        """The soft-deleted project as the bin lists it; a live row is NotFoundInRecycleBinError."""
        return await self._recycled(
            projects, _recycled_projects_query(), _recycled_project, "project", project_id
        )

    async def restore_project(self, project_id: int) -> None:
        with storage_errors("recycle_bin.restore_project"):
            async with self.context.atomic() as context:
                row = await context.query_one(
                    select(projects.c.deleted_at).where(
                        projects.c.id == project_id, projects.c.deleted_at.is_not(None)
                    )
                )
                if row is None:
                    raise NotFoundInRecycleBinError("project", project_id)
                stamp = row.deleted_at

                affected = await context.execute(
                    update(projects)
                    .where(projects.c.id == project_id, projects.c.deleted_at.is_not(None))
                    .values({projects.c.deleted_at: None})
                )
                if affected == 0:
                    raise NotFoundInRecycleBinError("project", project_id)

                restored = await context.execute(
                    update(tasks)
                    .where(tasks.c.project_id == project_id, tasks.c.deleted_at == stamp)
                    .values({tasks.c.deleted_at: None})
                )
        logger.debug("Restored project %s with %d cascaded tasks", project_id, restored)

    async def hard_delete_project(self, project_id: int) -> None:
        with storage_errors("recycle_bin.hard_delete_project"):
            async with self.context.atomic() as context:
                affected = await context.execute(
                    delete(projects).where(
                        projects.c.id == project_id, projects.c.deleted_at.is_not(None)
                    )
                )
                if affected == 0:
                    raise NotFoundInRecycleBinError("project", project_id)
                # The foreign key cascades on PostgreSQL; SQLite only enforces it on request
                await context.execute(delete(tasks).where(tasks.c.project_id == project_id))

    # ── Tasks ─────────────────────────────────────────────────────────────

    async def list_recycled_tasks(self, limit: int, offset: int) -> Tuple[List[RecycledTask], int]:
        return await self._listing(
            tasks, _recycled_tasks_query(), _recycled_task, limit, offset, "recycle_bin.list_tasks"
        )

    async def get_recycled_task(self, task_id: int) -> RecycledTask:
        return await self._recycled(tasks, _recycled_tasks_query(), _recycled_task, "task", task_id)

    async def restore_task(self, task_id: int) -> None:
        statement = (
            update(tasks)
            .where(tasks.c.id == task_id, tasks.c.deleted_at.is_not(None))
            .values({tasks.c.deleted_at: None})
        )
        with storage_errors("recycle_bin.restore_task"):
            affected = await self.context.execute(statement)
        if affected == 0:
            raise NotFoundInRecycleBinError("task", task_id)

    async def hard_delete_task(self, task_id: int) -> None:
        statement = delete(tasks).where(tasks.c.id == task_id, tasks.c.deleted_at.is_not(None))
        with storage_errors("recycle_bin.hard_delete_task"):
            affected = await self.context.execute(statement)
        if affected == 0:
            raise NotFoundInRecycleBinError("task", task_id)
