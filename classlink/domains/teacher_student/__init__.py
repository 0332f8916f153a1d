# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher-student relationship domain.

Provides the TeacherStudentService for binding students to teachers and
keeping at most one default teacher per student.
"""

from classlink.domains.teacher_student.errors import (
    AlreadyExistsError,
    ErrorKind,
    InfrastructureError,
    NotFoundError,
    RelationNotFoundError,
    StudentNotFoundError,
    TeacherNotFoundError,
    TeacherStudentServiceError,
    ValidationError,
)
from classlink.domains.teacher_student.service import TeacherStudentService

__all__ = [
    "TeacherStudentService",
    "TeacherStudentServiceError",
    "ErrorKind",
    "ValidationError",
    "NotFoundError",
    "TeacherNotFoundError",
    "StudentNotFoundError",
    "RelationNotFoundError",
    "AlreadyExistsError",
    "InfrastructureError",
]
