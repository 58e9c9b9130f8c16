"""
Taskboard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the persistence core and services.
How:   Every exception carries a user-facing message, a debug context dict and
       a class-level `kind`. Global handlers (main.py) map the kind to an HTTP
       status; nothing ever inspects the rendered message text.

Exception Hierarchy:
    TaskboardError (base)
    ├── NotFoundError                → 404 (absent or soft-deleted)
    │   └── NotFoundInRecycleBinError → 404 (restore / hard delete of a live row)
    ├── ConflictError                → 409 (uniqueness violation)
    ├── ValidationError              → 400 (malformed input, bad JSON document)
    └── ConnectivityError            → 500 (storage unreachable or failed)
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """The error taxonomy. Handlers branch on these values."""

    NOT_FOUND = "not_found"
    NOT_FOUND_IN_RECYCLE_BIN = "not_found_in_recycle_bin"
    CONFLICT = "conflict"
    VALIDATION = "validation_error"
    CONNECTIVITY = "connectivity_error"


class TaskboardError(Exception):
    """
    Base exception for all Taskboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for validation errors)
    """

    kind: ErrorKind = ErrorKind.CONNECTIVITY

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(TaskboardError):
    """
    Raised when a row is absent or not visible under its soft-delete state.

    Also raised when a conditional update (soft delete, status update) affects
    zero rows: a second delete of the same row lands here, never as success.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class NotFoundInRecycleBinError(NotFoundError):
    """
    Raised when restore or hard delete targets a row that is not soft-deleted.

    Hard delete is only permitted from within the recycle bin; a live row (or a
    missing one) is reported with this kind.
    """

    kind = ErrorKind.NOT_FOUND_IN_RECYCLE_BIN

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(resource=resource, resource_id=resource_id, context=context)
        self.message = f"{resource} with ID '{resource_id}' was not found in the recycle bin"
        self.args = (self.message,)


class ConflictError(TaskboardError):
    """Raised when a uniqueness constraint (e.g. username) is violated."""

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(TaskboardError):
    """
    Raised when malformed input reaches the service or repository layer.

    What:    Missing required fields, unknown status values, oversized bulk
             imports, JSON documents that cannot be encoded or decoded.
    HTTP:    400 Bad Request

    Request-body validation runs first in the HTTP layer; these checks are the
    last line of defense for callers that bypass it.
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConnectivityError(TaskboardError):
    """
    Raised when storage is unreachable or a statement fails for infrastructure
    reasons (lost connection, pool exhausted, deadline exceeded).

    Security Note:
        The message returned to the client is always generic. The operation
        context and the driver error are logged server-side only.
    """

    kind = ErrorKind.CONNECTIVITY

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
