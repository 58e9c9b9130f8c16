"""
Taskboard Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires configuration, the Database, middleware, exception
       handlers and routers together. Everything the routes need is placed
       on `app.state` (database, settings, build_info, started_at).
Who:   uvicorn (`taskboard.main:app`) and the test suite, which passes its
       own Database into the factory.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Access Log → CORS         │
    │                                                     │
    │  Routes:                                            │
    │    /api/v1/projects           /api/v1/system        │
    │    /api/v1/projects/{id}/tasks    /health /version  │
    │                                                     │
    │  Exception Handlers (by error kind):                │
    │    not_found, not_found_in_recycle_bin → 404        │
    │    conflict → 409     validation_error → 400        │
    │    connectivity_error, unexpected → 500             │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log the build identity
    Shutdown: dispose the database engine (close all pooled connections)
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskboard import __version__
from taskboard.config import Settings, settings as default_settings
from taskboard.database import Database
from taskboard.exceptions import ErrorKind, TaskboardError
from taskboard.middleware.logging import RequestLoggingMiddleware
from taskboard.middleware.request_id import RequestIDMiddleware, request_id_var
from taskboard.routes import health, projects, system, tasks
from taskboard.schemas.common import APIError, APIResponse

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NOT_FOUND_IN_RECYCLE_BIN: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONNECTIVITY: 500,
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configures the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] taskboard.services.project_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings
    setup_logging(config.log_level)

    build = app.state.build_info
    logger.info("=" * 60)
    logger.info("%s %s starting (%s)", build.app_name, build.version, build.environment)
    logger.info("Build time: %s, commit: %s", build.build_time, build.git_commit)
    logger.info("=" * 60)

    yield

    logger.info("%s shutting down...", build.app_name)
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int, code: str, message: str, details: Optional[Any] = None
) -> JSONResponse:
    body = APIResponse(
        success=False,
        error=APIError(
            code=code,
            message=message,
            details=details,
            request_id=request_id_var.get("") or None,
        ),
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps errors to HTTP responses by their kind, never by message text.

    Security: connectivity and unexpected errors return a generic message;
    their context and stack traces are logged server-side only.
    """

    @app.exception_handler(TaskboardError)
    async def handle_taskboard_error(request: Request, exc: TaskboardError):
        rid = request_id_var.get("")
        status_code = ERROR_STATUS.get(exc.kind, 500)
        if status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.kind.value, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, exc.kind.value, exc.message)

        details = exc.context if exc.kind == ErrorKind.VALIDATION else None
        return error_response(status_code, exc.kind.value, exc.message, details)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request: %d validation errors", rid, len(exc.errors()))
        return error_response(
            400,
            ErrorKind.VALIDATION.value,
            "Request validation failed",
            details=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Builds the application.

    Args:
        config:   Settings to use; defaults to the environment-loaded singleton
        database: Database to serve from; defaults to one built from `config`

    The database is attached eagerly rather than in the lifespan handler so
    that in-process clients that skip lifespan events can still serve requests.
    """
    config = config or default_settings
    build_info = config.build_info

    app = FastAPI(
        title=build_info.app_name,
        description="Projects and tasks with a recycle bin and a durable audit trail.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.build_info = build_info
    app.state.database = database or Database.from_settings(config)
    app.state.started_at = time.time()

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(projects.router)
    app.include_router(tasks.router)
    app.include_router(system.router)
    app.include_router(health.router)

    return app


# uvicorn entry point: `uvicorn taskboard.main:app`
app = create_app()
