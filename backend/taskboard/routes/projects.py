"""
Taskboard Backend — Project Routes
===================================

    GET    /api/v1/projects              list live projects (paginated, optional owner filter)
    POST   /api/v1/projects              create
    GET    /api/v1/projects/{id}         get
    PUT    /api/v1/projects/{id}         partial update
    DELETE /api/v1/projects/{id}         move to recycle bin (with its tasks)

New projects are owned by the acting user; without an actor header they go
to the configured default owner.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from taskboard.config import Settings
from taskboard.database import Database
from taskboard.routes.deps import (
    envelope,
    get_audit_context,
    get_database,
    get_pagination,
    get_settings,
    paginated,
)
from taskboard.schemas.audit import AuditContext
from taskboard.schemas.common import APIResponse, PaginationParams
from taskboard.schemas.project import ProjectRequest, ProjectUpdateRequest
from taskboard.services.project_service import project_service

router = APIRouter(prefix="/api/v1/projects", tags=["Projects"])


@router.get("", response_model=APIResponse, summary="List projects")
async def list_projects(
    owner_id: Optional[int] = Query(default=None, ge=1, description="Only projects of this owner"),
    pagination: PaginationParams = Depends(get_pagination),
    db: Database = Depends(get_database),
) -> JSONResponse:
    projects, meta = await project_service.list_projects(db, pagination, owner_id=owner_id)
    return paginated(projects, meta, message="Projects retrieved successfully")


@router.post("", response_model=APIResponse, status_code=201, summary="Create a project")
async def create_project(
    body: ProjectRequest,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    owner_id = audit.actor_id or settings.default_owner_id
    project = await project_service.create_project(db, body, owner_id=owner_id, audit=audit)
    return envelope(project, message="Project created successfully", status_code=201)


@router.get("/{project_id}", response_model=APIResponse, summary="Get a project")
async def get_project(project_id: int, db: Database = Depends(get_database)) -> JSONResponse:
    project = await project_service.get_project(db, project_id)
    return envelope(project, message="Project retrieved successfully")


@router.put("/{project_id}", response_model=APIResponse, summary="Update a project")
async def update_project(
    project_id: int,
    body: ProjectUpdateRequest,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    project = await project_service.update_project(db, project_id, body, audit=audit)
    return envelope(project, message="Project updated successfully")


@router.delete("/{project_id}", response_model=APIResponse, summary="Delete a project")
async def delete_project(
    project_id: int,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    await project_service.delete_project(db, project_id, audit=audit)
    return envelope(message="Project moved to recycle bin")
