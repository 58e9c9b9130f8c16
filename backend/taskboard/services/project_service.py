"""
Taskboard Backend — Project Service
====================================

What:  Project use cases: list, get, create, partial update, soft delete.
How:   Reads go straight to the pooled repositories. Every mutation opens a
       transaction, performs the write, appends the audit record through the
       same transaction and commits.

Design Decision:
    ProjectService is stateless: it receives the Database for each call,
    so tests can hand it a mock and no state is shared between requests.
"""

import logging
from typing import List, Optional, Tuple

from taskboard.database import Database
from taskboard.schemas.audit import AuditContext
from taskboard.schemas.common import Pagination, PaginationParams
from taskboard.schemas.project import Project, ProjectRequest, ProjectUpdateRequest
from taskboard.services.audit_trail import record_action

logger = logging.getLogger(__name__)


class ProjectService:
    async def list_projects(
        self,
        db: Database,
        pagination: PaginationParams,
        owner_id: Optional[int] = None,
    ) -> Tuple[List[Project], Pagination]:
        """Live projects, newest first; optionally only those of one owner."""
        if owner_id is not None:
            projects, total = await db.projects.list_by_owner(
                owner_id, pagination.limit, pagination.offset
            )
        else:
            projects, total = await db.projects.list(pagination.limit, pagination.offset)
        return projects, Pagination.build(pagination, total)

    async def get_project(self, db: Database, project_id: int) -> Project:
        return await db.projects.get_by_id(project_id)

    async def create_project(
        self,
        db: Database,
        request: ProjectRequest,
        owner_id: int,
        audit: Optional[AuditContext] = None,
    ) -> Project:
        async with db.transaction() as tx:
            project = await tx.projects.create(
                Project(name=request.name, description=request.description, owner_id=owner_id)
            )
            await record_action(tx, audit, "create", "project", project.id, project)
            await tx.commit()

        logger.info("Project %s created (owner=%s)", project.id, owner_id)
        return project

    async def update_project(
        self,
        db: Database,
        project_id: int,
        request: ProjectUpdateRequest,
        audit: Optional[AuditContext] = None,
    ) -> Project:
        """
        Partial update: only non-empty fields of the request overwrite the
        stored values; the merged row is written back as a full replace.
        """
        changes = {field: value for field, value in request.model_dump().items() if value}

        async with db.transaction() as tx:
            current = await tx.projects.get_by_id(project_id)
            project = await tx.projects.update(current.model_copy(update=changes))
            await record_action(tx, audit, "update", "project", project.id, project)
            await tx.commit()

        logger.info("Project %s updated (fields=%s)", project_id, sorted(changes))
        return project

    async def delete_project(
        self,
        db: Database,
        project_id: int,
        audit: Optional[AuditContext] = None,
    ) -> None:
        """Moves the project and its live tasks to the recycle bin."""
        async with db.transaction() as tx:
            project = await tx.projects.get_by_id(project_id)
            await tx.projects.delete(project_id)
            await record_action(tx, audit, "delete", "project", project_id, project)
            await tx.commit()

        logger.info("Project %s moved to recycle bin", project_id)


project_service = ProjectService()
