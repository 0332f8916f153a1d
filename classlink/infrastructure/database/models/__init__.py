# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for ClassLink."""

from classlink.infrastructure.database.models.base import Base
from classlink.infrastructure.database.models.teacher_student import TeacherStudent
from classlink.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "TeacherStudent",
    "User",
]
