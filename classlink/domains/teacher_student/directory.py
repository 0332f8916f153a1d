# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User directory contract and its SQLAlchemy implementation.

The relationship service only needs to know whether a user exists and,
for queries, the user's display fields.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from classlink.infrastructure.database.connection import DatabaseError
from classlink.infrastructure.database.models import User
from classlink.models.user import UserProfile


class UserDirectory(Protocol):
    """Read-only user lookups by identifier."""

    async def exists(self, user_id: str) -> bool:
        ...

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the user's profile, or None if no such user exists."""
        ...


class SQLAlchemyUserDirectory:
    """User directory backed by the ``users`` table.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists(self, user_id: str) -> bool:
        return await self.get_profile(user_id) is not None

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Get a user profile by ID.

        Args:
            user_id: User identifier.

        Returns:
            UserProfile if found, None otherwise.

        Raises:
            DatabaseError: If the lookup fails.
        """
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
        except SQLAlchemyError as e:
            raise DatabaseError("User lookup failed", e) from e

        user = result.scalar_one_or_none()
        if user is None:
            return None
        return UserProfile.model_validate(user)
