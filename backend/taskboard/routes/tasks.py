"""
Taskboard Backend — Task Routes
================================

All task endpoints live under their project; a task is only reachable
through the project it belongs to.

    GET    /api/v1/projects/{id}/tasks                      list (optional ?status=)
    POST   /api/v1/projects/{id}/tasks                      create
    POST   /api/v1/projects/{id}/tasks/bulk-import          create 1..1000 tasks atomically
    GET    /api/v1/projects/{id}/tasks/{task_id}            get
    PUT    /api/v1/projects/{id}/tasks/{task_id}            partial update
    PATCH  /api/v1/projects/{id}/tasks/{task_id}/status     status only
    DELETE /api/v1/projects/{id}/tasks/{task_id}            move to recycle bin
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
from taskboard.schemas.task import (
    BulkImportRequest,
    TaskRequest,
    TaskStatus,
    TaskStatusUpdate,
    TaskUpdateRequest,
)
from taskboard.services.task_service import task_service

router = APIRouter(prefix="/api/v1/projects/{project_id}/tasks", tags=["Tasks"])


@router.get("", response_model=APIResponse, summary="List tasks of a project")
async def list_tasks(
    project_id: int,
    status: Optional[TaskStatus] = Query(default=None, description="Only tasks in this status"),
    pagination: PaginationParams = Depends(get_pagination),
    db: Database = Depends(get_database),
) -> JSONResponse:
    tasks, meta = await task_service.list_tasks(db, project_id, pagination, status=status)
    return paginated(tasks, meta, message="Tasks retrieved successfully")


@router.post("", response_model=APIResponse, status_code=201, summary="Create a task")
async def create_task(
    project_id: int,
    body: TaskRequest,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    task = await task_service.create_task(db, project_id, body, audit=audit)
    return envelope(task, message="Task created successfully", status_code=201)


@router.post(
    "/bulk-import",
    response_model=APIResponse,
    status_code=201,
    summary="Import many tasks in one transaction",
)
async def bulk_import_tasks(
    project_id: int,
    body: BulkImportRequest,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await task_service.bulk_import(
        db, project_id, body, audit=audit, max_tasks=settings.bulk_import_max_tasks
    )
    return envelope(result, message="Tasks imported successfully", status_code=201)


@router.get("/{task_id}", response_model=APIResponse, summary="Get a task")
async def get_task(
    project_id: int, task_id: int, db: Database = Depends(get_database)
) -> JSONResponse:
    task = await task_service.get_task(db, project_id, task_id)
    return envelope(task, message="Task retrieved successfully")


@router.put("/{task_id}", response_model=APIResponse, summary="Update a task")
async def update_task(
    project_id: int,
    task_id: int,
    body: TaskUpdateRequest,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    task = await task_service.update_task(db, project_id, task_id, body, audit=audit)
    return envelope(task, message="Task updated successfully")


@router.patch("/{task_id}/status", response_model=APIResponse, summary="Change task status")
async def update_task_status(
    project_id: int,
    task_id: int,
    body: TaskStatusUpdate,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    task = await task_service.update_status(db, project_id, task_id, body.status, audit=audit)
    return envelope(task, message="Task status updated successfully")


@router.delete("/{task_id}", response_model=APIResponse, summary="Delete a task")
async def delete_task(
    project_id: int,
    task_id: int,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    await task_service.delete_task(db, project_id, task_id, audit=audit)
    return envelope(message="Task moved to recycle bin")
