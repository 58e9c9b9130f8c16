"""User repository: hard delete, lookup by unique username."""

from sqlalchemy import select

from taskboard.exceptions import NotFoundError
from taskboard.models import UserRecord
from taskboard.repositories.base import Repository, storage_errors
from taskboard.schemas.user import User


class UserRepository(Repository[User]):
    resource = "user"
    table = UserRecord.__table__
    entity = User
    writable = ("username", "password_hash", "role")
    required = ("username", "password_hash")

    async def get_by_username(self, username: str) -> User:
        statement = select(self.table).where(self.table.c.username == username)
        with storage_errors("user.get_by_username"):
            row = await self.context.query_one(statement)
        if row is None:
            raise NotFoundError("user", username)
        return self._from_row(row)
