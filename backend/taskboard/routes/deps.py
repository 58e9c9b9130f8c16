"""
Taskboard Backend — Route Dependencies
=======================================

What:  FastAPI dependencies shared by the route modules, plus the success
       envelope helper.

    get_database       the Database stored on app.state by the app factory
    get_pagination     page/page_size query parameters
    get_audit_context  actor (X-User-ID header), client IP and User-Agent
    envelope           wraps data in {success, message, data, timestamp}

The actor header is set by the authentication layer in front of this
service and is trusted as-is.
"""

from typing import Any, Optional

from fastapi import Header, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from taskboard.config import Settings
from taskboard.database import Database
from taskboard.schemas.audit import AuditContext
from taskboard.schemas.common import APIResponse, PaginatedData, Pagination, PaginationParams


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pagination(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    page_size: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)


def get_audit_context(
    request: Request,
    x_user_id: Optional[int] = Header(default=None, description="Acting user, set by the auth layer"),
) -> AuditContext:
    return AuditContext(
        actor_id=x_user_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def envelope(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    body = APIResponse(success=True, message=message, data=data)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def paginated(items: list, pagination: Pagination, message: Optional[str] = None) -> JSONResponse:
    return envelope(PaginatedData(data=items, pagination=pagination), message=message)
