# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher-student relationship API endpoints.

This module provides endpoints for teacher-student relationship management:
- GET /teacher-student - Query relationships by teacher and/or student
- POST /teacher-student - Bind a student to a teacher
- PUT /teacher-student - Replace one of a student's teachers
- DELETE /teacher-student - Unbind a student from a teacher
- GET /students/{student_id}/default-teacher - Get the default teacher
- PUT /students/{student_id}/default-teacher - Set the default teacher
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from classlink.api.dependencies import get_teacher_student_service
from classlink.domains.teacher_student.errors import ErrorKind, TeacherStudentServiceError
from classlink.domains.teacher_student.service import TeacherStudentService
from classlink.models.teacher_student import (
    BindTeacherRequest,
    BindTeacherResponse,
    RebindTeacherRequest,
    RebindTeacherResponse,
    RelationshipListResponse,
    SetDefaultTeacherRequest,
    SetDefaultTeacherResponse,
    UnbindTeacherResponse,
)
from classlink.models.user import UserSummary

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.INFRASTRUCTURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _to_http_error(error: TeacherStudentServiceError) -> HTTPException:
    """Map a service error to an HTTP error by its kind."""
    return HTTPException(
        status_code=_STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.message,
    )


@router.get(
    "/teacher-student",
    response_model=RelationshipListResponse,
    summary="Query teacher-student relationships",
)
async def query_relationships(
    teacher_id: Annotated[str | None, Query(description="Filter by teacher")] = None,
    student_id: Annotated[str | None, Query(description="Filter by student")] = None,
    service: TeacherStudentService = Depends(get_teacher_student_service),
) -> RelationshipListResponse:
    """Query relationships. At least one filter is required."""
    try:
        return await service.query_relationships(teacher_id=teacher_id, student_id=student_id)
    except TeacherStudentServiceError as e:
        raise _to_http_error(e) from e


@router.post(
    "/teacher-student",
    response_model=BindTeacherResponse,
    summary="Bind a student to a teacher",
)
async def bind_teacher(
    data: BindTeacherRequest,
    service: TeacherStudentService = Depends(get_teacher_student_service),
) -> BindTeacherResponse:
    """Bind a student to a teacher.

    Binding an existing pair succeeds and reports ``already_bound``.
    """
    logger.info(
        "Binding teacher: teacher=%s, student=%s, set_default=%s",
        data.teacher_id,
        data.student_id,
        data.set_default,
    )
    try:
        return await service.bind(
            student_id=data.student_id,
            teacher_id=data.teacher_id,
            set_default=data.set_default,
        )
    except TeacherStudentServiceError as e:
        raise _to_http_error(e) from e


@router.put(
    "/teacher-student",
    response_model=RebindTeacherResponse,
    summary="Replace one of a student's teachers",
)
async def rebind_teacher(
    data: RebindTeacherRequest,
    service: TeacherStudentService = Depends(get_teacher_student_service),
) -> RebindTeacherResponse:
    """Replace the current teacher with a new one."""
    try:
        return await service.rebind(
            student_id=data.student_id,
            current_teacher_id=data.current_teacher_id,
            new_teacher_id=data.new_teacher_id,
            set_default=data.set_default,
        )
    except TeacherStudentServiceError as e:
        raise _to_http_error(e) from e


@router.delete(
    "/teacher-student",
    response_model=UnbindTeacherResponse,
    summary="Unbind a student from a teacher",
)
async def unbind_teacher(
    student_id: Annotated[str, Query(description="Student identifier")],
    teacher_id: Annotated[str, Query(description="Teacher identifier")],
    service: TeacherStudentService = Depends(get_teacher_student_service),
) -> UnbindTeacherResponse:
    """Remove a relationship. The student may be left without a default teacher."""
    try:
        return await service.unbind(student_id=student_id, teacher_id=teacher_id)
    except TeacherStudentServiceError as e:
        raise _to_http_error(e) from e


@router.get(
    "/students/{student_id}/default-teacher",
    response_model=UserSummary | None,
    summary="Get a student's default teacher",
)
async def get_default_teacher(
    student_id: str,
    service: TeacherStudentService = Depends(get_teacher_student_service),
) -> UserSummary | None:
    """Get the default teacher, or null if the student has none."""
    try:
        return await service.get_default_teacher(student_id)
    except TeacherStudentServiceError as e:
        raise _to_http_error(e) from e


@router.put(
    "/students/{student_id}/default-teacher",
    response_model=SetDefaultTeacherResponse,
    summary="Set a student's default teacher",
)
async def set_default_teacher(
    student_id: str,
    data: SetDefaultTeacherRequest,
    service: TeacherStudentService = Depends(get_teacher_student_service),
) -> SetDefaultTeacherResponse:
    """Make a teacher the default, binding them first if needed."""
    try:
        return await service.set_default_teacher(student_id=student_id, teacher_id=data.teacher_id)
    except TeacherStudentServiceError as e:
        raise _to_http_error(e) from e
