# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Builds relationship views by joining store rows with user profiles.

Three query shapes are supported: by teacher, by student, and by both.
Every user referenced by a matched row is resolved through the user
directory; a row pointing at an unknown user is reported as not found.
"""

import logging

from classlink.domains.teacher_student.directory import UserDirectory
from classlink.domains.teacher_student.errors import (
    StudentNotFoundError,
    TeacherNotFoundError,
    ValidationError,
)
from classlink.domains.teacher_student.store import RelationshipStore
from classlink.models.teacher_student import RelationshipView
from classlink.models.user import UserProfile

logger = logging.getLogger(__name__)


class RelationshipQueryAssembler:
    """Assembles RelationshipView rows for relationship queries.

    Attributes:
        store: Relationship store.
        directory: User directory.
    """

    def __init__(self, store: RelationshipStore, directory: UserDirectory) -> None:
        self.store = store
        self.directory = directory

    async def assemble(
        self,
        teacher_id: str | None = None,
        student_id: str | None = None,
    ) -> list[RelationshipView]:
        """Dispatch to the query shape matching the given filters.

        Raises:
            ValidationError: If neither filter is given.
        """
        if teacher_id and student_id:
            return await self.by_both(teacher_id, student_id)
        if teacher_id:
            return await self.by_teacher(teacher_id)
        if student_id:
            return await self.by_student(student_id)
        raise ValidationError("At least one of teacher_id or student_id is required")

    async def by_teacher(self, teacher_id: str) -> list[RelationshipView]:
        teacher = await self._get_teacher(teacher_id)
        student_ids = await self.store.list_students_of(teacher_id)

        views = []
        for student_id in student_ids:
            student = await self._get_student(student_id)
            default_teacher_id = await self.store.get_default(student_id)
            views.append(self._to_view(teacher, student, default_teacher_id == teacher.id))

        return views

    async def by_student(self, student_id: str) -> list[RelationshipView]:
        student = await self._get_student(student_id)
        teacher_ids = await self.store.list_teachers_of(student_id)
        default_teacher_id = await self.store.get_default(student_id)

        views = []
        for teacher_id in teacher_ids:
            teacher = await self._get_teacher(teacher_id)
            views.append(self._to_view(teacher, student, default_teacher_id == teacher.id))

        return views

    async def by_both(self, teacher_id: str, student_id: str) -> list[RelationshipView]:
        teacher = await self._get_teacher(teacher_id)
        student = await self._get_student(student_id)

        if not await self.store.exists(teacher_id, student_id):
            return []

        default_teacher_id = await self.store.get_default(student_id)
        return [self._to_view(teacher, student, default_teacher_id == teacher.id)]

    async def _get_teacher(self, teacher_id: str) -> UserProfile:
        profile = await self.directory.get_profile(teacher_id)
        if profile is None:
            raise TeacherNotFoundError(f"Teacher {teacher_id} not found")
        return profile

    async def _get_student(self, student_id: str) -> UserProfile:
        profile = await self.directory.get_profile(student_id)
        if profile is None:
            raise StudentNotFoundError(f"Student {student_id} not found")
        return profile

    @staticmethod
    def _to_view(teacher: UserProfile, student: UserProfile, is_default: bool) -> RelationshipView:
        return RelationshipView(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            teacher_email=teacher.email,
            teacher_phone=teacher.phone,
            student_id=student.id,
            student_name=student.name,
            student_email=student.email,
            student_phone=student.phone,
            is_default=is_default,
        )
