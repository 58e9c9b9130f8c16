"""
Taskboard Backend — Health and Version Routes
==============================================

What:  Liveness/readiness probe and build identity.
How:   /health round-trips `SELECT 1` through the pooled context. The
       service is only healthy when the database answers; otherwise the
       probe returns 503 so load balancers route traffic away.
       /version returns the BuildInfo handed to the app factory.
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from taskboard.database import Database
from taskboard.exceptions import TaskboardError
from taskboard.routes.deps import get_database
from taskboard.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request, db: Database = Depends(get_database)) -> JSONResponse:
    db_status = "connected"
    overall = "healthy"
    try:
        await db.ping()
    except TaskboardError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e.message)

    body = HealthResponse(
        status=overall,
        version=request.app.state.build_info.version,
        database=db_status,
        uptime_seconds=round(time.time() - request.app.state.started_at, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(),
    )


@router.get("/version", summary="Build and deployment information")
async def version(request: Request) -> dict:
    return request.app.state.build_info.model_dump()
