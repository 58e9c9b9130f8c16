"""
Taskboard Backend — Project Schemas
====================================

What:  The Project entity, its request bodies and the recycle-bin projection.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Project(BaseModel):
    """
    A project as stored. `deleted_at` is None for live projects; the
    repositories never return soft-deleted projects through normal reads.
    """

    id: Optional[int] = None
    name: str
    description: str = ""
    owner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class ProjectRequest(BaseModel):
    """Body of POST /projects."""

    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="")


class ProjectUpdateRequest(BaseModel):
    """
    Body of PUT /projects/{id}.

    Partial-update semantics: only non-empty fields overwrite the stored
    values. The service merges before handing a full row to the repository.
    """

    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None


class RecycledProject(BaseModel):
    """
    Read-only projection of a soft-deleted project.

    deleted_tasks_count: how many of the project's tasks are in the recycle
    bin right now (cascaded with the project or deleted on their own).
    """

    id: int
    name: str
    description: str = ""
    owner_id: int
    owner_username: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime
    deleted_tasks_count: int = 0
