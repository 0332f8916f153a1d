# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the teacher-student relationship domain.

Every exception carries an ``ErrorKind`` so the presentation layer can
map it to a transport status without knowing the concrete class.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error taxonomy of the relationship service."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INFRASTRUCTURE = "infrastructure"


class TeacherStudentServiceError(Exception):
    """Base exception for teacher-student service errors."""

    kind: ErrorKind = ErrorKind.INFRASTRUCTURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TeacherStudentServiceError):
    """Raised when a command is malformed. Raised before any I/O."""

    kind = ErrorKind.VALIDATION


class NotFoundError(TeacherStudentServiceError):
    """Raised when a referenced user or relationship does not exist."""

    kind = ErrorKind.NOT_FOUND


class TeacherNotFoundError(NotFoundError):
    """Raised when teacher is not found."""

    pass


class StudentNotFoundError(NotFoundError):
    """Raised when student is not found."""

    pass


class RelationNotFoundError(NotFoundError):
    """Raised when the teacher-student relation is not found."""

    pass


class AlreadyExistsError(TeacherStudentServiceError):
    """Raised when an entity that must be unique already exists.

    A duplicate bind is not an error and never raises this.
    """

    kind = ErrorKind.ALREADY_EXISTS


class InfrastructureError(TeacherStudentServiceError):
    """Raised when the store or the user directory fails.

    Attributes:
        original_error: The underlying exception.
    """

    kind = ErrorKind.INFRASTRUCTURE

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.original_error = original_error
