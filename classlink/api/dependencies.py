# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Example:
    @router.get("/teacher-student")
    async def query_relationships(
        service: TeacherStudentService = Depends(get_teacher_student_service),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from classlink.core.config import get_settings
from classlink.domains.teacher_student.directory import SQLAlchemyUserDirectory
from classlink.domains.teacher_student.service import TeacherStudentService
from classlink.domains.teacher_student.store import SQLAlchemyRelationshipStore
from classlink.infrastructure.database.connection import (
    close_database,
    get_session,
    init_database,
)

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize database connections."""
    await init_database(get_settings())
    logger.info("Database connection initialized")


async def close_db() -> None:
    """Close database connections."""
    await close_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession for the request.
    """
    async with get_session() as session:
        yield session


def get_teacher_student_service(
    db: AsyncSession = Depends(get_db),
) -> TeacherStudentService:
    """Get teacher-student service bound to the request's session.

    Args:
        db: Database session.

    Returns:
        Configured TeacherStudentService instance.
    """
    return TeacherStudentService(
        store=SQLAlchemyRelationshipStore(db),
        directory=SQLAlchemyUserDirectory(db),
    )
