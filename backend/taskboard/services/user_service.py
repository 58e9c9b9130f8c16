"""
Taskboard Backend — User Service
=================================

Account records only. Password hashing and token handling belong to the
auth layer in front of this service; `register` receives a hash that was
already computed there and never sees a plain-text password.
"""

import logging
from typing import Optional, Union

from taskboard.database import Database
from taskboard.exceptions import ValidationError
from taskboard.schemas.audit import AuditContext
from taskboard.schemas.user import User, UserRole
from taskboard.services.audit_trail import record_action

logger = logging.getLogger(__name__)


def parse_role(role: Union[str, UserRole]) -> UserRole:
    try:
        return UserRole(role)
    except ValueError as exc:
        raise ValidationError(f"Invalid role '{role}'", field="role") from exc


class UserService:
    async def register(
        self,
        db: Database,
        username: str,
        password_hash: str,
        role: Union[str, UserRole] = UserRole.USER,
        audit: Optional[AuditContext] = None,
    ) -> User:
        """Creates the account. A taken username raises ConflictError."""
        async with db.transaction() as tx:
            user = await tx.users.create(
                User(username=username, password_hash=password_hash, role=parse_role(role))
            )
            if audit is None or audit.actor_id is None:
                # Self-registration: the new account is its own actor
                audit = AuditContext(
                    actor_id=user.id,
                    ip_address=audit.ip_address if audit else None,
                    user_agent=audit.user_agent if audit else None,
                )
            await record_action(tx, audit, "create", "user", user.id, user)
            await tx.commit()

        logger.info("User %s registered as %s", user.id, user.role.value)
        return user

    async def get_user(self, db: Database, user_id: int) -> User:
        return await db.users.get_by_id(user_id)

    async def get_by_username(self, db: Database, username: str) -> User:
        return await db.users.get_by_username(username)

    async def change_role(
        self,
        db: Database,
        user_id: int,
        role: Union[str, UserRole],
        audit: Optional[AuditContext] = None,
    ) -> User:
        new_role = parse_role(role)
        async with db.transaction() as tx:
            current = await tx.users.get_by_id(user_id)
            user = await tx.users.update(current.model_copy(update={"role": new_role}))
            await record_action(tx, audit, "update", "user", user_id, {"role": new_role.value})
            await tx.commit()

        logger.info("User %s role changed to %s", user_id, new_role.value)
        return user

    async def delete_user(
        self, db: Database, user_id: int, audit: Optional[AuditContext] = None
    ) -> None:
        async with db.transaction() as tx:
            user = await tx.users.get_by_id(user_id)
            await tx.users.delete(user_id)
            await record_action(tx, audit, "delete", "user", user_id, user)
            await tx.commit()

        logger.info("User %s deleted", user_id)


user_service = UserService()
