# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Decision logic for teacher-student relationship commands.

The functions in this module are pure: given a snapshot of the state a
command touches, they return the ordered store effects that carry out the
command while keeping at most one default teacher per student. They do no
I/O and keep no state, so the service owns sequencing and transactions.

Store semantics the plans rely on:
- CreateRelationship inserts the row and makes it the student's default
  (clearing any other default).
- PromoteToDefault clears every other default of the student and sets the
  target, in one atomic store call.

Example:
    >>> snapshot = RelationshipSnapshot(student_id="s1")
    >>> plan = plan_bind(snapshot, teacher_id="t1", want_default=False)
    >>> plan.effects
    (CreateRelationship(teacher_id='t1', student_id='s1'),)
    >>> plan.is_default
    True
"""

from dataclasses import dataclass, field
from typing import Union

from classlink.domains.teacher_student.errors import (
    RelationNotFoundError,
    ValidationError,
)


@dataclass(frozen=True)
class CreateRelationship:
    """Insert the (teacher, student) row; it becomes the default."""

    teacher_id: str
    student_id: str


@dataclass(frozen=True)
class RemoveRelationship:
    """Delete the (teacher, student) row."""

    teacher_id: str
    student_id: str


@dataclass(frozen=True)
class PromoteToDefault:
    """Make teacher the student's only default teacher."""

    student_id: str
    teacher_id: str


Effect = Union[CreateRelationship, RemoveRelationship, PromoteToDefault]


@dataclass(frozen=True)
class RelationshipSnapshot:
    """Point-in-time view of one student's relationships.

    ``bound_teacher_ids`` must contain every teacher referenced by the
    command that is currently bound to the student; it may contain more.

    Attributes:
        student_id: Student the snapshot describes.
        default_teacher_id: Current default teacher, if any.
        bound_teacher_ids: Teachers currently bound to the student.
    """

    student_id: str
    default_teacher_id: str | None = None
    bound_teacher_ids: frozenset[str] = field(default_factory=frozenset)

    def is_bound(self, teacher_id: str) -> bool:
        return teacher_id in self.bound_teacher_ids

    def is_default(self, teacher_id: str) -> bool:
        return self.default_teacher_id is not None and self.default_teacher_id == teacher_id


@dataclass(frozen=True)
class RelationshipPlan:
    """Effects to execute, in order, and the outcome they produce.

    Attributes:
        effects: Store effects in execution order.
        is_default: Whether the target teacher is the default afterwards.
        already_bound: The pair existed before the command (bind only).
        was_default: The removed teacher was the default (rebind/unbind).
        created: The command creates a new relationship row.
    """

    effects: tuple[Effect, ...]
    is_default: bool
    already_bound: bool = False
    was_default: bool = False
    created: bool = False


def plan_bind(
    snapshot: RelationshipSnapshot,
    teacher_id: str,
    want_default: bool,
) -> RelationshipPlan:
    """Plan binding a teacher to the snapshot's student.

    A duplicate bind is accepted: it only promotes the pair when
    ``want_default`` asks for it. A new pair becomes the default unless the
    student already had one and the caller opted out, in which case the
    previous default is restored after the insert.
    """
    student_id = snapshot.student_id

    if snapshot.is_bound(teacher_id):
        if want_default and not snapshot.is_default(teacher_id):
            return RelationshipPlan(
                effects=(PromoteToDefault(student_id, teacher_id),),
                is_default=True,
                already_bound=True,
            )
        return RelationshipPlan(
            effects=(),
            is_default=snapshot.is_default(teacher_id),
            already_bound=True,
        )

    effects: list[Effect] = [CreateRelationship(teacher_id, student_id)]
    previous_default = snapshot.default_teacher_id
    is_default = True

    if not want_default and previous_default is not None and previous_default != teacher_id:
        effects.append(PromoteToDefault(student_id, previous_default))
        is_default = False

    return RelationshipPlan(effects=tuple(effects), is_default=is_default, created=True)


def plan_rebind(
    snapshot: RelationshipSnapshot,
    current_teacher_id: str,
    new_teacher_id: str,
    want_default: bool,
) -> RelationshipPlan:
    """Plan replacing current_teacher_id with new_teacher_id.

    The new teacher inherits default status from the teacher it replaces;
    ``want_default`` can force it otherwise. When the new teacher does not
    take the default, the student's existing default is restored after the
    insert, as in ``plan_bind``.

    Raises:
        ValidationError: If both teachers are the same.
        RelationNotFoundError: If the current pair does not exist.
    """
    if current_teacher_id == new_teacher_id:
        raise ValidationError("New teacher must differ from the current teacher")

    student_id = snapshot.student_id
    if not snapshot.is_bound(current_teacher_id):
        raise RelationNotFoundError(
            f"Relation between teacher {current_teacher_id} and student {student_id} not found"
        )

    was_default = snapshot.is_default(current_teacher_id)
    effects: list[Effect] = [RemoveRelationship(current_teacher_id, student_id)]

    created = not snapshot.is_bound(new_teacher_id)
    if created:
        effects.append(CreateRelationship(new_teacher_id, student_id))

    previous_default = snapshot.default_teacher_id
    if want_default or was_default:
        effects.append(PromoteToDefault(student_id, new_teacher_id))
        is_default = True
    elif created and previous_default is not None:
        effects.append(PromoteToDefault(student_id, previous_default))
        is_default = False
    else:
        # Without a previous default the inserted row keeps the flag.
        is_default = snapshot.is_default(new_teacher_id) or created

    return RelationshipPlan(
        effects=tuple(effects),
        is_default=is_default,
        was_default=was_default,
        created=created,
    )


def plan_unbind(snapshot: RelationshipSnapshot, teacher_id: str) -> RelationshipPlan:
    """Plan removing a teacher from the snapshot's student.

    No replacement default is chosen when the default teacher is removed.

    Raises:
        RelationNotFoundError: If the pair does not exist.
    """
    student_id = snapshot.student_id
    if not snapshot.is_bound(teacher_id):
        raise RelationNotFoundError(
            f"Relation between teacher {teacher_id} and student {student_id} not found"
        )

    return RelationshipPlan(
        effects=(RemoveRelationship(teacher_id, student_id),),
        is_default=False,
        was_default=snapshot.is_default(teacher_id),
    )


def plan_set_default(snapshot: RelationshipSnapshot, teacher_id: str) -> RelationshipPlan:
    """Plan making teacher_id the default, binding it first if needed."""
    student_id = snapshot.student_id

    if not snapshot.is_bound(teacher_id):
        return RelationshipPlan(
            effects=(
                CreateRelationship(teacher_id, student_id),
                PromoteToDefault(student_id, teacher_id),
            ),
            is_default=True,
            created=True,
        )

    if snapshot.is_default(teacher_id):
        return RelationshipPlan(effects=(), is_default=True, already_bound=True)

    return RelationshipPlan(
        effects=(PromoteToDefault(student_id, teacher_id),),
        is_default=True,
        already_bound=True,
    )
