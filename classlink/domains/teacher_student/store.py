# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Relationship store contract and its SQLAlchemy implementation.

The store persists ``(teacher_id, student_id, is_default)`` rows. Every
method is expected to read its own writes within one service call, and
``set_default`` must switch the default in a single statement so that
concurrent callers never observe two defaults for a student.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, AsyncIterator, Protocol

from sqlalchemy import delete, exists, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from classlink.domains.teacher_student.errors import RelationNotFoundError
from classlink.infrastructure.database.connection import DatabaseError
from classlink.infrastructure.database.models import TeacherStudent

logger = logging.getLogger(__name__)


class RelationshipStore(Protocol):
    """Persistence operations the relationship service depends on."""

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Group store calls into one unit of work (commit or roll back)."""
        ...

    async def add(self, teacher_id: str, student_id: str) -> None:
        """Insert the pair as the student's default. No-op if it exists."""
        ...

    async def remove(self, teacher_id: str, student_id: str) -> None:
        """Delete the pair. Raises RelationNotFoundError if absent."""
        ...

    async def exists(self, teacher_id: str, student_id: str) -> bool:
        ...

    async def set_default(self, student_id: str, teacher_id: str) -> None:
        """Make the pair the only default. Raises RelationNotFoundError if absent."""
        ...

    async def get_default(self, student_id: str) -> str | None:
        ...

    async def list_teachers_of(self, student_id: str) -> list[str]:
        ...

    async def list_students_of(self, teacher_id: str) -> list[str]:
        ...


class SQLAlchemyRelationshipStore:
    """Relationship store backed by the ``teacher_students`` table.

    Statements run on the given session; ``transaction()`` commits them
    together.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit on success, roll back on any exception.

        Raises:
            DatabaseError: If the commit or any statement fails.
        """
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError("Relationship transaction failed", e) from e
        except Exception:
            await self.db.rollback()
            raise

    async def add(self, teacher_id: str, student_id: str) -> None:
        if await self.exists(teacher_id, student_id):
            return

        await self._execute(
            update(TeacherStudent)
            .where(TeacherStudent.student_id == student_id)
            .values(is_default=False)
        )
        await self._execute(
            insert(TeacherStudent)
            .values(teacher_id=teacher_id, student_id=student_id, is_default=True)
            .on_conflict_do_nothing(index_elements=["teacher_id", "student_id"])
        )
        logger.debug("Inserted relation: teacher=%s, student=%s", teacher_id, student_id)

    async def remove(self, teacher_id: str, student_id: str) -> None:
        result = await self._execute(
            delete(TeacherStudent).where(
                TeacherStudent.teacher_id == teacher_id,
                TeacherStudent.student_id == student_id,
            )
        )
        if result.rowcount == 0:
            raise RelationNotFoundError(
                f"Relation between teacher {teacher_id} and student {student_id} not found"
            )

    async def exists(self, teacher_id: str, student_id: str) -> bool:
        result = await self._execute(
            select(TeacherStudent.teacher_id).where(
                TeacherStudent.teacher_id == teacher_id,
                TeacherStudent.student_id == student_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def set_default(self, student_id: str, teacher_id: str) -> None:
        # One statement: every row of the student gets is_default = (teacher_id = target),
        # and only if the target row exists.
        target = aliased(TeacherStudent)
        result = await self._execute(
            update(TeacherStudent)
            .where(
                TeacherStudent.student_id == student_id,
                exists().where(
                    target.teacher_id == teacher_id,
                    target.student_id == student_id,
                ),
            )
            .values(is_default=TeacherStudent.teacher_id == teacher_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise RelationNotFoundError(
                f"Relation between teacher {teacher_id} and student {student_id} not found"
            )

    async def get_default(self, student_id: str) -> str | None:
        result = await self._execute(
            select(TeacherStudent.teacher_id)
            .where(
                TeacherStudent.student_id == student_id,
                TeacherStudent.is_default.is_(True),
            )
            .order_by(TeacherStudent.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_teachers_of(self, student_id: str) -> list[str]:
        result = await self._execute(
            select(TeacherStudent.teacher_id)
            .where(TeacherStudent.student_id == student_id)
            .order_by(TeacherStudent.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_students_of(self, teacher_id: str) -> list[str]:
        result = await self._execute(
            select(TeacherStudent.student_id)
            .where(TeacherStudent.teacher_id == teacher_id)
            .order_by(TeacherStudent.created_at.desc())
        )
        return list(result.scalars().all())

    async def _execute(self, statement: Any) -> Any:
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError("Relationship store operation failed", e) from e
