"""
Taskboard Backend — System Routes (Recycle Bin and Audit Log)
==============================================================

    GET    /api/v1/system/recycle/projects                 recycled projects
    POST   /api/v1/system/recycle/projects/{id}/restore    restore (with cascaded tasks)
    DELETE /api/v1/system/recycle/projects/{id}            permanent delete
    GET    /api/v1/system/recycle/tasks                    recycled tasks
    POST   /api/v1/system/recycle/tasks/{id}/restore       restore
    DELETE /api/v1/system/recycle/tasks/{id}               permanent delete
    GET    /api/v1/system/audit/logs                       audit trail, newest first

Permanent deletion only works on recycled rows; a live row answers 404.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from taskboard.database import Database
from taskboard.routes.deps import envelope, get_audit_context, get_database, get_pagination, paginated
from taskboard.schemas.audit import AuditContext
from taskboard.schemas.common import APIResponse, PaginationParams
from taskboard.services.recycle_bin_service import recycle_bin_service

router = APIRouter(prefix="/api/v1/system", tags=["System"])


# ── Recycled projects ─────────────────────────────────────────────────────

@router.get("/recycle/projects", response_model=APIResponse, summary="List recycled projects")
async def list_recycled_projects(
    pagination: PaginationParams = Depends(get_pagination),
    db: Database = Depends(get_database),
) -> JSONResponse:
    items, meta = await recycle_bin_service.list_projects(db, pagination)
    return paginated(items, meta, message="Recycled projects retrieved successfully")


@router.post(
    "/recycle/projects/{project_id}/restore",
    response_model=APIResponse,
    summary="Restore a recycled project",
)
async def restore_project(
    project_id: int,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    project = await recycle_bin_service.restore_project(db, project_id, audit=audit)
    return envelope(project, message="Project restored successfully")


@router.delete(
    "/recycle/projects/{project_id}",
    response_model=APIResponse,
    summary="Permanently delete a recycled project",
)
async def hard_delete_project(
    project_id: int,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    await recycle_bin_service.hard_delete_project(db, project_id, audit=audit)
    return envelope(message="Project permanently deleted")


# ── Recycled tasks ────────────────────────────────────────────────────────

@router.get("/recycle/tasks", response_model=APIResponse, summary="List recycled tasks")
async def list_recycled_tasks(
    pagination: PaginationParams = Depends(get_pagination),
    db: Database = Depends(get_database),
) -> JSONResponse:
    items, meta = await recycle_bin_service.list_tasks(db, pagination)
    return paginated(items, meta, message="Recycled tasks retrieved successfully")


@router.post(
    "/recycle/tasks/{task_id}/restore",
    response_model=APIResponse,
    summary="Restore a recycled task",
)
async def restore_task(
    task_id: int,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    task = await recycle_bin_service.restore_task(db, task_id, audit=audit)
    return envelope(task, message="Task restored successfully")


@router.delete(
    "/recycle/tasks/{task_id}",
    response_model=APIResponse,
    summary="Permanently delete a recycled task",
)
async def hard_delete_task(
    task_id: int,
    db: Database = Depends(get_database),
    audit: AuditContext = Depends(get_audit_context),
) -> JSONResponse:
    await recycle_bin_service.hard_delete_task(db, task_id, audit=audit)
    return envelope(message="Task permanently deleted")


# ── Audit trail ───────────────────────────────────────────────────────────

@router.get("/audit/logs", response_model=APIResponse, summary="List audit log entries")
async def list_audit_logs(
    pagination: PaginationParams = Depends(get_pagination),
    db: Database = Depends(get_database),
) -> JSONResponse:
    entries, meta = await recycle_bin_service.list_audit_logs(db, pagination)
    return paginated(entries, meta, message="Audit logs retrieved successfully")
