"""TaskLifecycle — the ServiceTask state machine.

The whole transition matrix lives in ``TRANSITIONS``: a pair
(current status, operation) that is not a key there is illegal. Assignment
operations fail with ``InvalidAssignment``; technician-driven operations
(start, complete) fail with ``InvalidStatusTransition``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.errors import InvalidAssignment, InvalidStatusTransition
from dispatch.domain.value_objects.enums import TaskOperation, TaskStatus

TRANSITIONS: dict[tuple[TaskStatus, TaskOperation], TaskStatus] = {
    (TaskStatus.UNASSIGNED, TaskOperation.ASSIGN): TaskStatus.ASSIGNED,
    (TaskStatus.ASSIGNED, TaskOperation.ASSIGN): TaskStatus.ASSIGNED,
    (TaskStatus.ASSIGNED, TaskOperation.REASSIGN): TaskStatus.ASSIGNED,
    (TaskStatus.IN_PROGRESS, TaskOperation.REASSIGN): TaskStatus.IN_PROGRESS,
    (TaskStatus.ASSIGNED, TaskOperation.START): TaskStatus.IN_PROGRESS,
    (TaskStatus.IN_PROGRESS, TaskOperation.COMPLETE): TaskStatus.COMPLETED,
}

_ASSIGNMENT_OPERATIONS = frozenset({TaskOperation.ASSIGN, TaskOperation.REASSIGN})


def allowed_sources(operation: TaskOperation) -> list[TaskStatus]:
    """Statuses from which *operation* is legal, in lifecycle order."""
    return [status for status in TaskStatus if (status, operation) in TRANSITIONS]


def next_status(current: TaskStatus, operation: TaskOperation) -> TaskStatus:
    """Look up the target status, raising the operation's error when illegal."""
    target = TRANSITIONS.get((current, operation))
    if target is not None:
        return target

    allowed = " or ".join(s.value for s in allowed_sources(operation))
    if operation in _ASSIGNMENT_OPERATIONS:
        verb = "assigned" if operation == TaskOperation.ASSIGN else "reassigned"
        raise InvalidAssignment(
            f"Task cannot be {verb}. Current status: {current.value}. "
            f"Only {allowed} tasks can be {verb}."
        )
    raise InvalidStatusTransition(
        f"Cannot {operation.value.lower()} task with status {current.value}. "
        f"Task must be {allowed}."
    )


class TaskLifecycle:
    """Applies lifecycle operations to a ServiceTask in place."""

    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def check(self, task: ServiceTask, operation: TaskOperation) -> TaskStatus:
        """Validate *operation* against the task without mutating it."""
        return next_status(task.status, operation)

    def assign(self, task: ServiceTask, technician_id: int) -> ServiceTask:
        task.status = next_status(task.status, TaskOperation.ASSIGN)
        task.assigned_technician_id = technician_id
        return task

    def reassign(self, task: ServiceTask, new_technician_id: int) -> ServiceTask:
        task.status = next_status(task.status, TaskOperation.REASSIGN)
        task.assigned_technician_id = new_technician_id
        return task

    def start(self, task: ServiceTask) -> ServiceTask:
        task.status = next_status(task.status, TaskOperation.START)
        task.started_at = self._clock()
        return task

    def complete(self, task: ServiceTask) -> ServiceTask:
        task.status = next_status(task.status, TaskOperation.COMPLETE)
        task.completed_at = self._clock()
        return task
