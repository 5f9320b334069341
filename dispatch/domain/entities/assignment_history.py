"""AssignmentHistory entity — immutable audit row, one per ledger transition."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from dispatch.domain.entities.assignment import Assignment
from dispatch.domain.value_objects.enums import HistoryAction


@dataclass(frozen=True)
class AssignmentHistory:
    id: int | None
    assignment_id: int
    task_id: int
    technician_id: int
    previous_technician_id: int | None
    action: HistoryAction
    action_by: str
    action_at: datetime
    reason: str | None = None

    @classmethod
    def for_creation(cls, assignment: Assignment, action_by: str, at: datetime) -> AssignmentHistory:
        return cls(
            id=None,
            assignment_id=assignment.id,
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            previous_technician_id=None,
            action=HistoryAction.CREATED,
            action_by=action_by,
            action_at=at,
        )

    @classmethod
    def for_reassignment(
        cls,
        assignment: Assignment,
        previous_technician_id: int,
        action_by: str,
        at: datetime,
        reason: str | None,
    ) -> AssignmentHistory:
        return cls(
            id=None,
            assignment_id=assignment.id,
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            previous_technician_id=previous_technician_id,
            action=HistoryAction.REASSIGNED,
            action_by=action_by,
            action_at=at,
            reason=reason,
        )

    @classmethod
    def for_completion(cls, assignment: Assignment, action_by: str, at: datetime) -> AssignmentHistory:
        return cls(
            id=None,
            assignment_id=assignment.id,
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            previous_technician_id=None,
            action=HistoryAction.COMPLETED,
            action_by=action_by,
            action_at=at,
        )
