"""AssignmentLedger — who held a task, and when.

Assignments are never deleted: a technician change flips the current ACTIVE
row to REASSIGNED and inserts a new ACTIVE row, and every transition appends
exactly one AssignmentHistory row. The status flip, the insert, the history
row and the task's lifecycle change share one unit of work, opened after a
row lock on the task so concurrent assignments of the same task serialize.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from dispatch.application.ports.unit_of_work import UnitOfWork
from dispatch.domain.entities.assignment import Assignment
from dispatch.domain.entities.assignment_history import AssignmentHistory
from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.errors import InvalidAssignment, TaskNotFound
from dispatch.domain.policies.task_lifecycle import TaskLifecycle
from dispatch.domain.value_objects.enums import AssignmentStatus, TaskOperation, TaskStatus

logger = logging.getLogger(__name__)


@dataclass
class LedgerEntry:
    """Outcome of one ledger transition."""

    task: ServiceTask
    assignment: Assignment | None
    history: AssignmentHistory | None
    previous_technician_id: int | None = None


class AssignmentLedger:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        lifecycle: TaskLifecycle | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._uow_factory = uow_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lifecycle = lifecycle or TaskLifecycle(clock=self._clock)

    def check_preconditions(
        self, task: ServiceTask, operation: TaskOperation, reason: str | None = None
    ) -> None:
        """Reject an assignment request before anything is written."""
        self._lifecycle.check(task, operation)

        if operation == TaskOperation.REASSIGN and task.assigned_technician_id is None:
            raise InvalidAssignment(
                f"Task {task.id} has no assigned technician. Use assign endpoint instead."
            )
        if task.status == TaskStatus.IN_PROGRESS and not (reason and reason.strip()):
            raise InvalidAssignment(
                f"Task {task.id} is IN_PROGRESS. A reason is required for "
                f"reassigning IN_PROGRESS tasks."
            )

    async def record_assignment(
        self,
        task_id: int,
        technician_id: int,
        actor: str,
        reason: str | None = None,
        operation: TaskOperation = TaskOperation.ASSIGN,
    ) -> LedgerEntry:
        """Make *technician_id* the task's active assignee, atomically.

        Steps, all inside one transaction:
        1. lock the task and re-check preconditions
        2. retire the current ACTIVE assignment (if any) as REASSIGNED
        3. insert the new ACTIVE assignment
        4. append a CREATED or REASSIGNED history row
        5. move the task through TaskLifecycle.assign / .reassign
        """
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_for_update(task_id)
            if task is None:
                raise TaskNotFound(task_id)
            self.check_preconditions(task, operation, reason)

            now = self._clock()
            prior = await uow.assignments.get_active_for_task(task_id)
            previous_technician_id = None
            history_reason = reason

            if prior is not None:
                previous_technician_id = prior.technician_id
                if not history_reason:
                    history_reason = (
                        f"Reassigned from technician {previous_technician_id} to {technician_id}"
                    )
                prior.mark_reassigned(history_reason)
                await uow.assignments.update(prior)
                logger.info("Marked previous assignment %d as REASSIGNED", prior.id)

            assignment = await uow.assignments.add(
                Assignment(
                    id=None,
                    task_id=task_id,
                    technician_id=technician_id,
                    assigned_at=now,
                    assigned_by=actor,
                    status=AssignmentStatus.ACTIVE,
                )
            )
            logger.info("Created assignment %d for task %d", assignment.id, task_id)

            if prior is None:
                entry = AssignmentHistory.for_creation(assignment, actor, now)
                self._lifecycle.assign(task, technician_id)
            else:
                entry = AssignmentHistory.for_reassignment(
                    assignment, previous_technician_id, actor, now, history_reason
                )
                self._lifecycle.reassign(task, technician_id)

            history = await uow.history.append(entry)
            await uow.tasks.update(task)
            await uow.commit()

        logger.info(
            "Task %d now held by technician %d (previous: %s, action: %s)",
            task_id, technician_id, previous_technician_id, history.action.value,
        )
        return LedgerEntry(
            task=task,
            assignment=assignment,
            history=history,
            previous_technician_id=previous_technician_id,
        )

    async def record_completion(self, uow: UnitOfWork, task: ServiceTask, actor: str) -> LedgerEntry:
        """Complete a locked task and close its active assignment.

        Runs inside the caller's unit of work; the caller has already locked
        the task and owns the commit.
        """
        self._lifecycle.complete(task)
        active = await uow.assignments.get_active_for_task(task.id)
        history = None
        if active is not None:
            active.mark_completed()
            await uow.assignments.update(active)
            history = await uow.history.append(
                AssignmentHistory.for_completion(active, actor, self._clock())
            )
        else:
            logger.warning("Task %d completed without an ACTIVE assignment row", task.id)

        await uow.tasks.update(task)
        logger.info("Task %d completed by %s", task.id, actor)
        return LedgerEntry(task=task, assignment=active, history=history)

    async def history_for(self, task_id: int) -> list[AssignmentHistory]:
        async with self._uow_factory() as uow:
            return await uow.history.list_for_task(task_id)
