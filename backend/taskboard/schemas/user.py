"""
Taskboard Backend — User Entity
================================

`password_hash` is excluded from every serialization (API responses and audit
snapshots alike); it only travels between the repository and the auth layer.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class User(BaseModel):
    id: Optional[int] = None
    username: str
    password_hash: str = Field(default="", exclude=True, repr=False)
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
