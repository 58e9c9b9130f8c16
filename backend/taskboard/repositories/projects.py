"""
Taskboard Backend — Project Repository
=======================================

Soft-delete repository for projects. Deleting a project also moves its live
tasks to the recycle bin: both are stamped with the same `deleted_at` value
in one atomic unit, which is what lets a later restore bring back exactly the
tasks that went away with the project.
"""

from typing import List, Tuple

from sqlalchemy import update

from taskboard.exceptions import NotFoundError
from taskboard.models import ProjectRecord, TaskRecord, utcnow
from taskboard.repositories.base import SoftDeleteRepository, storage_errors
from taskboard.schemas.project import Project


class ProjectRepository(SoftDeleteRepository[Project]):
    resource = "project"
    table = ProjectRecord.__table__
    entity = Project
    writable = ("name", "description", "owner_id")
    required = ("name", "owner_id")

    async def list_by_owner(self, owner_id: int, limit: int, offset: int) -> Tuple[List[Project], int]:
        criteria = [*self._visible(), self.table.c.owner_id == owner_id]
        return await self._page(criteria, limit, offset, action="list_by_owner")

    async def delete(self, project_id: int) -> None:
        projects = self.table
        tasks = TaskRecord.__table__
        stamp = utcnow()

        with storage_errors("project.delete"):
            async with self.context.atomic() as context:
                affected = await context.execute(
                    update(projects)
                    .where(projects.c.id == project_id, projects.c.deleted_at.is_(None))
                    .values({projects.c.deleted_at: stamp})
                )
                if affected == 0:
                    raise NotFoundError("project", project_id)

                await context.execute(
                    update(tasks)
                    .where(tasks.c.project_id == project_id, tasks.c.deleted_at.is_(None))
                    .values({tasks.c.deleted_at: stamp})
                )
