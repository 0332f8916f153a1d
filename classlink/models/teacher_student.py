# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher-student relationship request/response schemas.

Identifiers are opaque strings. Blank identifiers are accepted by the
schemas and rejected by the service, so that the same validation applies
whether the service is called over HTTP or directly.
"""

from pydantic import BaseModel, Field


class BindTeacherRequest(BaseModel):
    """Request to bind a student to a teacher."""

    student_id: str = Field(description="Student identifier")
    teacher_id: str = Field(description="Teacher identifier")
    set_default: bool = Field(
        default=False,
        description="Make this teacher the student's default teacher",
    )


class RebindTeacherRequest(BaseModel):
    """Request to replace one of a student's teachers with another."""

    student_id: str = Field(description="Student identifier")
    current_teacher_id: str = Field(description="Teacher currently bound")
    new_teacher_id: str = Field(description="Teacher replacing the current one")
    set_default: bool = Field(
        default=False,
        description="Make the new teacher the default even if the old one was not",
    )


class SetDefaultTeacherRequest(BaseModel):
    """Request to make a teacher the student's default teacher."""

    teacher_id: str


class BindTeacherResponse(BaseModel):
    """Result of a bind command."""

    message: str
    teacher_id: str
    student_id: str
    is_default: bool
    already_bound: bool = False


class RebindTeacherResponse(BaseModel):
    """Result of a rebind command."""

    message: str
    student_id: str
    previous_teacher_id: str
    new_teacher_id: str
    is_default: bool


class UnbindTeacherResponse(BaseModel):
    """Result of an unbind command.

    ``was_default`` tells the caller the student may now have no
    default teacher; no replacement is picked automatically.
    """

    message: str
    student_id: str
    teacher_id: str
    was_default: bool


class SetDefaultTeacherResponse(BaseModel):
    """Result of promoting a teacher to default."""

    message: str
    student_id: str
    teacher_id: str
    created: bool


class RelationshipView(BaseModel):
    """A relationship row decorated with both users' display fields."""

    teacher_id: str
    teacher_name: str
    teacher_email: str
    teacher_phone: str
    student_id: str
    student_name: str
    student_email: str
    student_phone: str
    is_default: bool


class RelationshipListResponse(BaseModel):
    """Relationships matching a query."""

    total: int
    relationships: list[RelationshipView]
