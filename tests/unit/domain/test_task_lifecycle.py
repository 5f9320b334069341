"""Tests for the TaskLifecycle state machine."""

from datetime import datetime, timezone

import pytest

from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.errors import InvalidAssignment, InvalidStatusTransition
from dispatch.domain.policies.task_lifecycle import (
    TRANSITIONS,
    TaskLifecycle,
    allowed_sources,
    next_status,
)
from dispatch.domain.value_objects.enums import Priority, TaskOperation, TaskStatus

FIXED = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def lifecycle():
    return TaskLifecycle(clock=lambda: FIXED)


def _task(status=TaskStatus.UNASSIGNED, technician_id=None):
    return ServiceTask(
        id=1, title="Fix boiler", description=None, client_address="12 Elm St",
        priority=Priority.HIGH, status=status, assigned_technician_id=technician_id,
    )


# ─── Transition matrix ───────────────────────────────────────────────


@pytest.mark.parametrize(
    "status,operation,expected",
    [
        (TaskStatus.UNASSIGNED, TaskOperation.ASSIGN, TaskStatus.ASSIGNED),
        (TaskStatus.ASSIGNED, TaskOperation.ASSIGN, TaskStatus.ASSIGNED),
        (TaskStatus.ASSIGNED, TaskOperation.REASSIGN, TaskStatus.ASSIGNED),
        (TaskStatus.IN_PROGRESS, TaskOperation.REASSIGN, TaskStatus.IN_PROGRESS),
        (TaskStatus.ASSIGNED, TaskOperation.START, TaskStatus.IN_PROGRESS),
        (TaskStatus.IN_PROGRESS, TaskOperation.COMPLETE, TaskStatus.COMPLETED),
    ],
)
def test_legal_transitions(status, operation, expected):
    assert next_status(status, operation) == expected


@pytest.mark.parametrize(
    "status,operation,error",
    [
        (TaskStatus.IN_PROGRESS, TaskOperation.ASSIGN, InvalidAssignment),
        (TaskStatus.COMPLETED, TaskOperation.ASSIGN, InvalidAssignment),
        (TaskStatus.UNASSIGNED, TaskOperation.REASSIGN, InvalidAssignment),
        (TaskStatus.COMPLETED, TaskOperation.REASSIGN, InvalidAssignment),
        (TaskStatus.UNASSIGNED, TaskOperation.START, InvalidStatusTransition),
        (TaskStatus.IN_PROGRESS, TaskOperation.START, InvalidStatusTransition),
        (TaskStatus.COMPLETED, TaskOperation.START, InvalidStatusTransition),
        (TaskStatus.UNASSIGNED, TaskOperation.COMPLETE, InvalidStatusTransition),
        (TaskStatus.ASSIGNED, TaskOperation.COMPLETE, InvalidStatusTransition),
        (TaskStatus.COMPLETED, TaskOperation.COMPLETE, InvalidStatusTransition),
    ],
)
def test_illegal_transitions(status, operation, error):
    with pytest.raises(error):
        next_status(status, operation)


def test_completed_is_terminal():
    assert not [op for (status, op) in TRANSITIONS if status == TaskStatus.COMPLETED]


def test_allowed_sources_for_assign():
    assert allowed_sources(TaskOperation.ASSIGN) == [TaskStatus.UNASSIGNED, TaskStatus.ASSIGNED]


def test_assign_error_message_names_current_status():
    with pytest.raises(InvalidAssignment, match="Current status: COMPLETED"):
        next_status(TaskStatus.COMPLETED, TaskOperation.ASSIGN)


# ─── TaskLifecycle ───────────────────────────────────────────────────


def test_assign_sets_technician(lifecycle):
    task = lifecycle.assign(_task(), 7)
    assert task.status == TaskStatus.ASSIGNED
    assert task.assigned_technician_id == 7


def test_reassign_keeps_in_progress(lifecycle):
    task = lifecycle.reassign(_task(TaskStatus.IN_PROGRESS, 7), 8)
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.assigned_technician_id == 8


def test_start_sets_started_at(lifecycle):
    task = lifecycle.start(_task(TaskStatus.ASSIGNED, 7))
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.started_at == FIXED


def test_start_unassigned_fails_and_leaves_task_untouched(lifecycle):
    task = _task()
    with pytest.raises(InvalidStatusTransition):
        lifecycle.start(task)
    assert task.status == TaskStatus.UNASSIGNED
    assert task.started_at is None


def test_complete_sets_completed_at(lifecycle):
    task = lifecycle.complete(_task(TaskStatus.IN_PROGRESS, 7))
    assert task.status == TaskStatus.COMPLETED
    assert task.completed_at == FIXED


def test_check_does_not_mutate(lifecycle):
    task = _task()
    assert lifecycle.check(task, TaskOperation.ASSIGN) == TaskStatus.ASSIGNED
    assert task.status == TaskStatus.UNASSIGNED
