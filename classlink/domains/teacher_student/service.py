# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher-student relationship service.

This module provides the TeacherStudentService class for:
- Binding, rebinding and unbinding students and teachers
- Promoting a teacher to a student's default teacher
- Querying relationships by teacher, by student or by both

Each command validates its identifiers before any I/O, confirms the users
exist, asks the decision engine for a plan and executes the planned
effects inside one store transaction. A failure part way through rolls
back the whole command.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from classlink.domains.teacher_student.assembler import RelationshipQueryAssembler
from classlink.domains.teacher_student.directory import UserDirectory
from classlink.domains.teacher_student.engine import (
    CreateRelationship,
    Effect,
    PromoteToDefault,
    RelationshipPlan,
    RelationshipSnapshot,
    RemoveRelationship,
    plan_bind,
    plan_rebind,
    plan_set_default,
    plan_unbind,
)
from classlink.domains.teacher_student.errors import (
    InfrastructureError,
    StudentNotFoundError,
    TeacherNotFoundError,
    ValidationError,
)
from classlink.domains.teacher_student.store import RelationshipStore
from classlink.infrastructure.database.connection import DatabaseError
from classlink.models.teacher_student import (
    BindTeacherResponse,
    RebindTeacherResponse,
    RelationshipListResponse,
    SetDefaultTeacherResponse,
    UnbindTeacherResponse,
)
from classlink.models.user import UserSummary

logger = logging.getLogger(__name__)


class TeacherStudentService:
    """Service for managing teacher-student relationships.

    Attributes:
        store: Relationship store.
        directory: User directory used for existence checks.
        assembler: Builds relationship views for queries.
    """

    def __init__(self, store: RelationshipStore, directory: UserDirectory) -> None:
        """Initialize teacher-student service.

        Args:
            store: Relationship store.
            directory: User directory.
        """
        self.store = store
        self.directory = directory
        self.assembler = RelationshipQueryAssembler(store, directory)

    async def bind(
        self,
        student_id: str,
        teacher_id: str,
        set_default: bool = False,
    ) -> BindTeacherResponse:
        """Bind a student to a teacher.

        Binding an existing pair is accepted and reported as
        ``already_bound``. A student's first teacher always becomes the
        default.

        Args:
            student_id: Student identifier.
            teacher_id: Teacher identifier.
            set_default: Make the teacher the default teacher.

        Returns:
            Bind result with the teacher's resulting default status.

        Raises:
            ValidationError: If an identifier is blank.
            TeacherNotFoundError: If teacher not found.
            StudentNotFoundError: If student not found.
            InfrastructureError: If the store or directory fails.
        """
        student_id = _require(student_id, "student_id")
        teacher_id = _require(teacher_id, "teacher_id")

        async with self._unit_of_work("bind"):
            await self._ensure_teacher_exists(teacher_id)
            await self._ensure_student_exists(student_id)

            snapshot = await self._snapshot(student_id, teacher_id)
            plan = plan_bind(snapshot, teacher_id, set_default)
            await self._execute(plan)

        if plan.already_bound:
            logger.warning(
                "Relation already exists: teacher=%s, student=%s", teacher_id, student_id
            )
            message = "Teacher already bound and set as default" if plan.is_default else "Teacher already bound"
        else:
            message = "Teacher bound and set as default" if plan.is_default else "Teacher bound"

        logger.info(
            "Bound teacher: teacher=%s, student=%s, is_default=%s",
            teacher_id,
            student_id,
            plan.is_default,
        )

        return BindTeacherResponse(
            message=message,
            teacher_id=teacher_id,
            student_id=student_id,
            is_default=plan.is_default,
            already_bound=plan.already_bound,
        )

    async def rebind(
        self,
        student_id: str,
        current_teacher_id: str,
        new_teacher_id: str,
        set_default: bool = False,
    ) -> RebindTeacherResponse:
        """Replace one of a student's teachers with another.

        The new teacher becomes the default if the replaced teacher was the
        default or if ``set_default`` is true.

        Raises:
            ValidationError: If an identifier is blank or both teachers are the same.
            TeacherNotFoundError: If the new teacher is not found.
            StudentNotFoundError: If student not found.
            RelationNotFoundError: If the current relation does not exist.
            InfrastructureError: If the store or directory fails.
        """
        student_id = _require(student_id, "student_id")
        current_teacher_id = _require(current_teacher_id, "current_teacher_id")
        new_teacher_id = _require(new_teacher_id, "new_teacher_id")
        if current_teacher_id == new_teacher_id:
            raise ValidationError("New teacher must differ from the current teacher")

        async with self._unit_of_work("rebind"):
            await self._ensure_teacher_exists(new_teacher_id)
            await self._ensure_student_exists(student_id)

            snapshot = await self._snapshot(student_id, current_teacher_id, new_teacher_id)
            plan = plan_rebind(snapshot, current_teacher_id, new_teacher_id, set_default)
            await self._execute(plan)

        logger.info(
            "Rebound teacher: student=%s, from=%s, to=%s, is_default=%s",
            student_id,
            current_teacher_id,
            new_teacher_id,
            plan.is_default,
        )

        return RebindTeacherResponse(
            message="Teacher relation updated",
            student_id=student_id,
            previous_teacher_id=current_teacher_id,
            new_teacher_id=new_teacher_id,
            is_default=plan.is_default,
        )

    async def unbind(self, student_id: str, teacher_id: str) -> UnbindTeacherResponse:
        """Remove a teacher-student relationship.

        Removing the default teacher leaves the student without a default;
        ``was_default`` reports that case.

        Raises:
            ValidationError: If an identifier is blank.
            RelationNotFoundError: If the relation does not exist.
            InfrastructureError: If the store fails.
        """
        student_id = _require(student_id, "student_id")
        teacher_id = _require(teacher_id, "teacher_id")

        async with self._unit_of_work("unbind"):
            snapshot = await self._snapshot(student_id, teacher_id)
            plan = plan_unbind(snapshot, teacher_id)
            await self._execute(plan)

        logger.info(
            "Unbound teacher: teacher=%s, student=%s, was_default=%s",
            teacher_id,
            student_id,
            plan.was_default,
        )

        return UnbindTeacherResponse(
            message="Teacher relation removed",
            student_id=student_id,
            teacher_id=teacher_id,
            was_default=plan.was_default,
        )

    async def set_default_teacher(
        self,
        student_id: str,
        teacher_id: str,
    ) -> SetDefaultTeacherResponse:
        """Make a teacher the student's default, binding them first if needed.

        Raises:
            ValidationError: If an identifier is blank.
            TeacherNotFoundError: If teacher not found.
            StudentNotFoundError: If student not found.
            InfrastructureError: If the store or directory fails.
        """
        student_id = _require(student_id, "student_id")
        teacher_id = _require(teacher_id, "teacher_id")

        async with self._unit_of_work("set_default_teacher"):
            await self._ensure_teacher_exists(teacher_id)
            await self._ensure_student_exists(student_id)

            snapshot = await self._snapshot(student_id, teacher_id)
            plan = plan_set_default(snapshot, teacher_id)
            await self._execute(plan)

        logger.info(
            "Default teacher set: teacher=%s, student=%s, created=%s",
            teacher_id,
            student_id,
            plan.created,
        )

        return SetDefaultTeacherResponse(
            message="Default teacher set",
            student_id=student_id,
            teacher_id=teacher_id,
            created=plan.created,
        )

    async def get_default_teacher(self, student_id: str) -> UserSummary | None:
        """Get the student's default teacher.

        Returns:
            The default teacher's summary, or None if the student has none.

        Raises:
            ValidationError: If student_id is blank.
            TeacherNotFoundError: If the default teacher no longer resolves.
            InfrastructureError: If the store or directory fails.
        """
        student_id = _require(student_id, "student_id")

        async with self._unit_of_work("get_default_teacher"):
            teacher_id = await self.store.get_default(student_id)
            if teacher_id is None:
                logger.info("Student has no default teacher: student=%s", student_id)
                return None

            profile = await self.directory.get_profile(teacher_id)
            if profile is None:
                raise TeacherNotFoundError(f"Default teacher {teacher_id} not found")

        return UserSummary.from_profile(profile)

    async def query_relationships(
        self,
        teacher_id: str | None = None,
        student_id: str | None = None,
    ) -> RelationshipListResponse:
        """Query relationships by teacher, by student or by both.

        Args:
            teacher_id: Filter by teacher.
            student_id: Filter by student.

        Returns:
            Matching relationships. Querying by both returns 0 or 1 rows.

        Raises:
            ValidationError: If neither filter is given.
            TeacherNotFoundError: If a referenced teacher is not found.
            StudentNotFoundError: If a referenced student is not found.
            InfrastructureError: If the store or directory fails.
        """
        teacher_id = teacher_id.strip() if teacher_id else None
        student_id = student_id.strip() if student_id else None
        if not teacher_id and not student_id:
            raise ValidationError("At least one of teacher_id or student_id is required")

        async with self._unit_of_work("query_relationships"):
            relationships = await self.assembler.assemble(teacher_id, student_id)

        logger.info(
            "Relationship query: teacher=%s, student=%s, total=%d",
            teacher_id,
            student_id,
            len(relationships),
        )

        return RelationshipListResponse(total=len(relationships), relationships=relationships)

    @asynccontextmanager
    async def _unit_of_work(self, operation: str) -> AsyncIterator[None]:
        """Run a command inside one store transaction.

        Raises:
            InfrastructureError: If the store or directory fails.
        """
        try:
            async with self.store.transaction():
                yield
        except DatabaseError as e:
            logger.error("Teacher-student %s failed: %s", operation, e)
            raise InfrastructureError(f"Teacher-student {operation} failed", e) from e

    async def _snapshot(self, student_id: str, *teacher_ids: str) -> RelationshipSnapshot:
        bound = set()
        for teacher_id in teacher_ids:
            if await self.store.exists(teacher_id, student_id):
                bound.add(teacher_id)

        return RelationshipSnapshot(
            student_id=student_id,
            default_teacher_id=await self.store.get_default(student_id),
            bound_teacher_ids=frozenset(bound),
        )

    async def _execute(self, plan: RelationshipPlan) -> None:
        for effect in plan.effects:
            await self._apply(effect)

    async def _apply(self, effect: Effect) -> None:
        if isinstance(effect, CreateRelationship):
            await self.store.add(effect.teacher_id, effect.student_id)
        elif isinstance(effect, RemoveRelationship):
            await self.store.remove(effect.teacher_id, effect.student_id)
        elif isinstance(effect, PromoteToDefault):
            await self.store.set_default(effect.student_id, effect.teacher_id)
        else:
            raise TypeError(f"Unknown relationship effect: {effect!r}")

    async def _ensure_teacher_exists(self, teacher_id: str) -> None:
        if not await self.directory.exists(teacher_id):
            raise TeacherNotFoundError(f"Teacher {teacher_id} not found")

    async def _ensure_student_exists(self, student_id: str) -> None:
        if not await self.directory.exists(student_id):
            raise StudentNotFoundError(f"Student {student_id} not found")


def _require(value: str | None, name: str) -> str:
    """Return the stripped identifier or raise ValidationError if blank."""
    if value is None or not value.strip():
        raise ValidationError(f"{name} must not be empty")
    return value.strip()
