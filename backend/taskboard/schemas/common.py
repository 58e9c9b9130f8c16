"""
Taskboard Backend — Shared Request/Response Schemas
=====================================================

What:  Pagination parameters, the pagination envelope and the uniform
       success/error response wrapper used by every endpoint.

Pagination contract:
    Request:  page ≥ 1 (default 1), page_size ∈ [1, 100] (default 20)
    Storage:  limit = page_size, offset = (page - 1) * page_size
    Response: {page, page_size, total, total_pages, has_next, has_prev}
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Validated page/page_size query parameters."""

    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: int = Field(default=20, ge=1, le=100, description="Items per page (max 100)")

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class Pagination(BaseModel):
    """
    What:  Pagination metadata returned next to every page of results.
    Why total_pages is computed here: the repository only reports `total`,
           which reflects the count query at call time.
    """

    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, params: PaginationParams, total: int) -> "Pagination":
        total_pages = math.ceil(total / params.page_size) if total else 0
        return cls(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=total_pages,
            has_next=params.page < total_pages,
            has_prev=params.page > 1,
        )


class PaginatedData(BaseModel):
    """A page of items plus its pagination metadata."""

    data: list
    pagination: Pagination


class APIError(BaseModel):
    """
    Machine-readable error body.

    code:       error kind (e.g. "not_found", "validation_error")
    message:    human-readable description
    details:    extra context (validation errors only)
    request_id: correlation ID for tracing this error in server logs
    """

    code: str
    message: str
    details: Optional[Any] = None
    request_id: Optional[str] = None


class APIResponse(BaseModel):
    """Uniform response envelope for both success and error responses."""

    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[APIError] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class HealthResponse(BaseModel):
    """Health check result: the service is healthy only if the database answers."""

    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
