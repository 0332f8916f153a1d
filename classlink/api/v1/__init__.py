# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    teacher_student: Teacher-student relationship endpoints.
"""

from fastapi import APIRouter

from classlink.api.v1 import teacher_student

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(teacher_student.router, tags=["Teacher-Student Relationships"])

__all__ = ["router"]
