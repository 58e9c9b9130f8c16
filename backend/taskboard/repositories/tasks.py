"""
Taskboard Backend — Task Repository
====================================

Soft-delete repository for tasks, plus:

    bulk_create      one insert per task on the bound context; a failure on
                     task k leaves tasks 0..k-1 written unless the context is
                     transactional and the caller rolls back
    update_status    single-column update (plus updated_at)
    get_by_status    paged, newest first
    get_by_project_id
"""

from typing import List, Sequence, Tuple, Union

from sqlalchemy import update

from taskboard.exceptions import NotFoundError, ValidationError
from taskboard.models import TaskRecord, utcnow
from taskboard.repositories.base import SoftDeleteRepository, storage_errors
from taskboard.schemas.task import Task, TaskStatus


def parse_status(status: Union[str, TaskStatus]) -> TaskStatus:
    try:
        return TaskStatus(status)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(
            f"Invalid task status '{status}'. Must be one of: {allowed}",
            field="status",
        ) from exc


class TaskRepository(SoftDeleteRepository[Task]):
    resource = "task"
    table = TaskRecord.__table__
    entity = Task
    writable = (
        "project_id",
        "title",
        "description",
        "status",
        "assignee_id",
        "due_date",
        "custom_fields",
        "tags",
        "metadata",
    )
    required = ("project_id", "title")
    json_fields = {"custom_fields": dict, "tags": list, "metadata": dict}

    async def bulk_create(self, tasks: Sequence[Task]) -> List[Task]:
        created = []
        for task in tasks:
            created.append(await self._insert(task, action="bulk_create"))
        return created

    async def update_status(self, task_id: int, status: Union[str, TaskStatus]) -> Task:
        new_status = parse_status(status)
        statement = (
            update(self.table)
            .where(self.table.c.id == task_id, *self._visible())
            .values({self.table.c.status: new_status.value, self.table.c.updated_at: utcnow()})
            .returning(*self.table.c)
        )
        with storage_errors("task.update_status"):
            row = await self.context.query_one(statement)
        if row is None:
            raise NotFoundError("task", task_id)
        return self._from_row(row)

    async def get_by_status(
        self, status: Union[str, TaskStatus], limit: int, offset: int
    ) -> Tuple[List[Task], int]:
        criteria = [*self._visible(), self.table.c.status == parse_status(status).value]
        return await self._page(criteria, limit, offset, action="get_by_status")

    async def get_by_project_id(self, project_id: int, limit: int, offset: int) -> Tuple[List[Task], int]:
        criteria = [*self._visible(), self.table.c.project_id == project_id]
        return await self._page(criteria, limit, offset, action="get_by_project_id")

    async def get_by_project_and_status(
        self, project_id: int, status: Union[str, TaskStatus], limit: int, offset: int
    ) -> Tuple[List[Task], int]:
        criteria = [
            *self._visible(),
            self.table.c.project_id == project_id,
            self.table.c.status == parse_status(status).value,
        ]
        return await self._page(criteria, limit, offset, action="get_by_project_and_status")
