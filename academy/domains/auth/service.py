# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role lookup and assignment against the user_roles table.

Example:
    >>> role_service = RoleService(db_session)
    >>> role = await role_service.resolve_role(user_id)
    >>> await role_service.assign_role(user_id, AppRole.TEACHER)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from academy.domains.auth.roles import AppRole, highest_role, parse_roles
from academy.infrastructure.database.models import UserRole

logger = logging.getLogger(__name__)


class RoleService:
    """Reads and grants application roles.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_roles(self, user_id: str) -> list[AppRole]:
        """All known roles held by a user (unknown strings are dropped)."""
        result = await self.db.execute(
            select(UserRole.role).where(UserRole.user_id == user_id)
        )
        return parse_roles(result.scalars().all())

    async def resolve_role(self, user_id: str) -> AppRole | None:
        """The user's single representative role, highest priority first."""
        return highest_role(await self.get_roles(user_id))

    async def has_super_admin(self) -> bool:
        """Whether any super_admin role row exists."""
        result = await self.db.execute(
            select(func.count())
            .select_from(UserRole)
            .where(UserRole.role == AppRole.SUPER_ADMIN.value)
        )
        return (result.scalar() or 0) > 0

    async def assign_role(self, user_id: str, role: AppRole) -> bool:
        """Grant a role unless the user already holds it.

        Does not commit; the caller owns the transaction.

        Returns:
            True if a row was inserted.
        """
        stmt = (
            insert(UserRole)
            .values(user_id=user_id, role=role.value)
            .on_conflict_do_nothing(index_elements=["user_id", "role"])
        )
        result = await self.db.execute(stmt)
        inserted = bool(result.rowcount)
        if inserted:
            logger.info("Granted role: user=%s, role=%s", user_id, role.value)
        return inserted
