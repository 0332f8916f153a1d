# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- In-memory relationship store and user directory
- A TeacherStudentService wired to them
"""

import copy
from contextlib import asynccontextmanager
from typing import AsyncIterator

import pytest

from classlink.domains.teacher_student.errors import RelationNotFoundError
from classlink.domains.teacher_student.service import TeacherStudentService
from classlink.infrastructure.database.connection import DatabaseError
from classlink.models.user import UserProfile


# =============================================================================
# In-memory collaborators
# =============================================================================


class InMemoryRelationshipStore:
    """Relationship store keeping rows in a list, newest last.

    ``transaction()`` restores the rows on failure, like a database
    rollback. Method names added to ``failures`` raise DatabaseError.
    """

    def __init__(self) -> None:
        self.rows: list[dict] = []
        self.calls: list[tuple] = []
        self.failures: set[str] = set()
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        saved = copy.deepcopy(self.rows)
        try:
            yield
            self.commits += 1
        except Exception:
            self.rows = saved
            self.rollbacks += 1
            raise

    async def add(self, teacher_id: str, student_id: str) -> None:
        self._record("add", teacher_id, student_id)
        if self._find(teacher_id, student_id) is not None:
            return
        for row in self.rows:
            if row["student_id"] == student_id:
                row["is_default"] = False
        self.rows.append({"teacher_id": teacher_id, "student_id": student_id, "is_default": True})

    async def remove(self, teacher_id: str, student_id: str) -> None:
        self._record("remove", teacher_id, student_id)
        row = self._find(teacher_id, student_id)
        if row is None:
            raise RelationNotFoundError("Relation not found")
        self.rows.remove(row)

    async def exists(self, teacher_id: str, student_id: str) -> bool:
        self._record("exists", teacher_id, student_id)
        return self._find(teacher_id, student_id) is not None

    async def set_default(self, student_id: str, teacher_id: str) -> None:
        self._record("set_default", student_id, teacher_id)
        if self._find(teacher_id, student_id) is None:
            raise RelationNotFoundError("Relation not found")
        for row in self.rows:
            if row["student_id"] == student_id:
                row["is_default"] = row["teacher_id"] == teacher_id

    async def get_default(self, student_id: str) -> str | None:
        self._record("get_default", student_id)
        for row in self.rows:
            if row["student_id"] == student_id and row["is_default"]:
                return row["teacher_id"]
        return None

    async def list_teachers_of(self, student_id: str) -> list[str]:
        self._record("list_teachers_of", student_id)
        return [r["teacher_id"] for r in reversed(self.rows) if r["student_id"] == student_id]

    async def list_students_of(self, teacher_id: str) -> list[str]:
        self._record("list_students_of", teacher_id)
        return [r["student_id"] for r in reversed(self.rows) if r["teacher_id"] == teacher_id]

    def defaults_of(self, student_id: str) -> list[str]:
        """Teachers flagged default for the student (test helper)."""
        return [
            r["teacher_id"]
            for r in self.rows
            if r["student_id"] == student_id and r["is_default"]
        ]

    def has(self, teacher_id: str, student_id: str) -> bool:
        return self._find(teacher_id, student_id) is not None

    def mutating_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in {"add", "remove", "set_default"}]

    def _find(self, teacher_id: str, student_id: str) -> dict | None:
        for row in self.rows:
            if row["teacher_id"] == teacher_id and row["student_id"] == student_id:
                return row
        return None

    def _record(self, name: str, *args: str) -> None:
        self.calls.append((name, *args))
        if name in self.failures:
            raise DatabaseError(f"{name} failed")


class InMemoryUserDirectory:
    """User directory backed by a dict of profiles."""

    def __init__(self, profiles: list[UserProfile] | None = None) -> None:
        self.profiles = {p.id: p for p in profiles or []}
        self.lookups: list[str] = []
        self.fail = False

    def add(self, user_id: str, role: str, name: str | None = None) -> UserProfile:
        profile = UserProfile(
            id=user_id,
            name=name or user_id.upper(),
            email=f"{user_id}@school.example",
            phone="555-0100",
            role=role,
        )
        self.profiles[user_id] = profile
        return profile

    async def exists(self, user_id: str) -> bool:
        return await self.get_profile(user_id) is not None

    async def get_profile(self, user_id: str) -> UserProfile | None:
        self.lookups.append(user_id)
        if self.fail:
            raise DatabaseError("User lookup failed")
        return self.profiles.get(user_id)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryRelationshipStore:
    """Provide an empty in-memory relationship store."""
    return InMemoryRelationshipStore()


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    """Provide a directory with students s1, s2 and teachers t1..t4."""
    users = InMemoryUserDirectory()
    for student_id in ("s1", "s2"):
        users.add(student_id, "student")
    for teacher_id in ("t1", "t2", "t3", "t4"):
        users.add(teacher_id, "teacher")
    return users


@pytest.fixture
def service(store, directory) -> TeacherStudentService:
    """Provide a TeacherStudentService wired to in-memory collaborators."""
    return TeacherStudentService(store=store, directory=directory)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
