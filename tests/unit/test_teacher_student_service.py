# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the teacher-student relationship service."""

import random

import pytest

from classlink.domains.teacher_student.errors import (
    ErrorKind,
    InfrastructureError,
    RelationNotFoundError,
    StudentNotFoundError,
    TeacherNotFoundError,
    ValidationError,
)


class TestBind:
    """Tests for binding a student to a teacher."""

    @pytest.mark.asyncio
    async def test_first_teacher_becomes_default(self, service, store):
        result = await service.bind("s1", "t1")

        assert result.is_default is True
        assert result.already_bound is False
        assert store.defaults_of("s1") == ["t1"]

    @pytest.mark.asyncio
    async def test_second_teacher_keeps_previous_default(self, service, store):
        await service.bind("s1", "t1")
        result = await service.bind("s1", "t2", set_default=False)

        assert result.is_default is False
        assert await store.get_default("s1") == "t1"
        assert store.has("t2", "s1")

    @pytest.mark.asyncio
    async def test_set_default_moves_default(self, service, store):
        await service.bind("s1", "t1", set_default=True)
        await service.bind("s1", "t2", set_default=True)

        assert await store.get_default("s1") == "t2"
        assert store.has("t1", "s1")
        assert store.defaults_of("s1") == ["t2"]

    @pytest.mark.asyncio
    async def test_duplicate_bind_is_idempotent(self, service, store):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")
        before = [dict(r) for r in store.rows]

        result = await service.bind("s1", "t2", set_default=False)

        assert result.already_bound is True
        assert result.is_default is False
        assert store.rows == before

    @pytest.mark.asyncio
    async def test_duplicate_bind_can_promote(self, service, store):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")

        result = await service.bind("s1", "t2", set_default=True)

        assert result.already_bound is True
        assert result.is_default is True
        assert store.defaults_of("s1") == ["t2"]

    @pytest.mark.asyncio
    async def test_response_echoes_identifiers(self, service):
        result = await service.bind(" s1 ", "t1")

        assert result.student_id == "s1"
        assert result.teacher_id == "t1"
        assert result.message

    @pytest.mark.asyncio
    async def test_teacher_not_found(self, service, store):
        with pytest.raises(TeacherNotFoundError) as exc_info:
            await service.bind("s1", "ghost")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert store.rows == []

    @pytest.mark.asyncio
    async def test_student_not_found(self, service):
        with pytest.raises(StudentNotFoundError):
            await service.bind("ghost", "t1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("student_id,teacher_id", [("", "t1"), ("s1", ""), ("  ", "t1")])
    async def test_blank_identifiers_rejected_before_io(
        self, service, store, directory, student_id, teacher_id
    ):
        with pytest.raises(ValidationError):
            await service.bind(student_id, teacher_id)

        assert store.calls == []
        assert directory.lookups == []


class TestRebind:
    """Tests for replacing one of a student's teachers."""

    @pytest.mark.asyncio
    async def test_rebind_default_teacher_preserves_default(self, service, store):
        await service.bind("s1", "t1")

        result = await service.rebind("s1", "t1", "t3", set_default=False)

        assert result.is_default is True
        assert result.previous_teacher_id == "t1"
        assert result.new_teacher_id == "t3"
        assert await store.get_default("s1") == "t3"
        assert not store.has("t1", "s1")

    @pytest.mark.asyncio
    async def test_rebind_non_default_teacher(self, service, store):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")

        result = await service.rebind("s1", "t2", "t3")

        assert result.is_default is False
        assert await store.get_default("s1") == "t1"
        assert store.has("t3", "s1")

    @pytest.mark.asyncio
    async def test_rebind_to_already_bound_teacher_skips_add(self, service, store):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")
        store.calls.clear()

        await service.rebind("s1", "t1", "t2")

        assert ("add", "t2", "s1") not in store.calls
        assert await store.get_default("s1") == "t2"

    @pytest.mark.asyncio
    async def test_self_rebind_rejected_regardless_of_state(self, service, store):
        await service.bind("s1", "t1")
        store.calls.clear()

        with pytest.raises(ValidationError):
            await service.rebind("s1", "t1", "t1", set_default=True)

        with pytest.raises(ValidationError):
            await service.rebind("s2", "t4", "t4")

        assert store.calls == []

    @pytest.mark.asyncio
    async def test_rebind_missing_relation(self, service, store):
        with pytest.raises(RelationNotFoundError):
            await service.rebind("s1", "t1", "t2")

        assert store.mutating_calls() == []

    @pytest.mark.asyncio
    async def test_rebind_new_teacher_not_found(self, service):
        await service.bind("s1", "t1")

        with pytest.raises(TeacherNotFoundError):
            await service.rebind("s1", "t1", "ghost")

    @pytest.mark.asyncio
    async def test_failure_mid_rebind_rolls_back(self, service, store):
        await service.bind("s1", "t1")
        store.failures.add("add")

        with pytest.raises(InfrastructureError) as exc_info:
            await service.rebind("s1", "t1", "t3")

        assert exc_info.value.kind is ErrorKind.INFRASTRUCTURE
        assert store.has("t1", "s1")
        assert store.defaults_of("s1") == ["t1"]
        assert store.rollbacks == 1

    @pytest.mark.asyncio
    async def test_failure_aborts_remaining_effects(self, service, store):
        await service.bind("s1", "t1")
        store.failures.add("remove")
        store.calls.clear()

        with pytest.raises(InfrastructureError):
            await service.rebind("s1", "t1", "t3")

        assert ("add", "t3", "s1") not in store.calls
        assert ("set_default", "s1", "t3") not in store.calls


class TestUnbind:
    """Tests for removing a relationship."""

    @pytest.mark.asyncio
    async def test_unbind_default_leaves_no_default(self, service, store):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")

        result = await service.unbind("s1", "t1")

        assert result.was_default is True
        assert await store.get_default("s1") is None
        assert store.has("t2", "s1")

    @pytest.mark.asyncio
    async def test_unbind_non_default(self, service, store):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")

        result = await service.unbind("s1", "t2")

        assert result.was_default is False
        assert await store.get_default("s1") == "t1"

    @pytest.mark.asyncio
    async def test_unbind_missing_relation(self, service, store):
        with pytest.raises(RelationNotFoundError):
            await service.unbind("s1", "t1")

        assert store.mutating_calls() == []

    @pytest.mark.asyncio
    async def test_unbind_blank_identifier(self, service, store):
        with pytest.raises(ValidationError):
            await service.unbind("s1", " ")

        assert store.calls == []


class TestDefaultTeacher:
    """Tests for promoting and reading the default teacher."""

    @pytest.mark.asyncio
    async def test_set_default_binds_missing_teacher(self, service, store):
        await service.bind("s1", "t1")

        result = await service.set_default_teacher("s1", "t2")

        assert result.created is True
        assert store.defaults_of("s1") == ["t2"]
        assert store.has("t1", "s1")

    @pytest.mark.asyncio
    async def test_set_default_existing_teacher(self, service, store):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")

        result = await service.set_default_teacher("s1", "t2")

        assert result.created is False
        assert store.defaults_of("s1") == ["t2"]

    @pytest.mark.asyncio
    async def test_get_default_teacher(self, service):
        await service.bind("s1", "t1")

        teacher = await service.get_default_teacher("s1")

        assert teacher is not None
        assert teacher.id == "t1"
        assert teacher.email == "t1@school.example"

    @pytest.mark.asyncio
    async def test_get_default_teacher_none(self, service):
        assert await service.get_default_teacher("s1") is None

    @pytest.mark.asyncio
    async def test_get_default_teacher_unresolvable(self, service, directory):
        await service.bind("s1", "t1")
        del directory.profiles["t1"]

        with pytest.raises(TeacherNotFoundError):
            await service.get_default_teacher("s1")


class TestQueryRelationships:
    """Tests for relationship queries through the service."""

    @pytest.mark.asyncio
    async def test_query_requires_a_filter(self, service, store):
        with pytest.raises(ValidationError):
            await service.query_relationships(teacher_id=None, student_id=None)

        with pytest.raises(ValidationError):
            await service.query_relationships(teacher_id=" ", student_id="")

        assert store.calls == []

    @pytest.mark.asyncio
    async def test_query_by_student(self, service):
        await service.bind("s1", "t1")
        await service.bind("s1", "t2")

        result = await service.query_relationships(student_id="s1")

        assert result.total == 2
        defaults = {r.teacher_id: r.is_default for r in result.relationships}
        assert defaults == {"t1": True, "t2": False}

    @pytest.mark.asyncio
    async def test_directory_failure_is_infrastructure(self, service, directory):
        directory.fail = True

        with pytest.raises(InfrastructureError):
            await service.query_relationships(student_id="s1")


class TestScenarios:
    """End-to-end behaviour over sequences of commands."""

    @pytest.mark.asyncio
    async def test_bind_bind_rebind_scenario(self, service, store):
        first = await service.bind("s1", "t1", set_default=False)
        assert first.is_default is True

        second = await service.bind("s1", "t2", set_default=False)
        assert second.is_default is False
        assert await store.get_default("s1") == "t1"

        rebound = await service.rebind("s1", "t1", "t3", set_default=False)
        assert rebound.is_default is True
        assert await store.get_default("s1") == "t3"
        assert not store.has("t1", "s1")
        assert store.has("t2", "s1")

    @pytest.mark.asyncio
    async def test_at_most_one_default_after_random_commands(self, service, store):
        rng = random.Random(1234)
        students = ["s1", "s2"]
        teachers = ["t1", "t2", "t3", "t4"]

        for _ in range(300):
            student = rng.choice(students)
            command = rng.choice(["bind", "rebind", "unbind", "set_default"])
            try:
                if command == "bind":
                    await service.bind(student, rng.choice(teachers), rng.random() < 0.5)
                elif command == "rebind":
                    current, new = rng.sample(teachers, 2)
                    await service.rebind(student, current, new, rng.random() < 0.5)
                elif command == "unbind":
                    await service.unbind(student, rng.choice(teachers))
                else:
                    await service.set_default_teacher(student, rng.choice(teachers))
            except RelationNotFoundError:
                pass

            for s in students:
                assert len(store.defaults_of(s)) <= 1
