"""Assignment entity — one technician's tenure on a task."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from dispatch.domain.value_objects.enums import AssignmentStatus


@dataclass
class Assignment:
    id: int | None
    task_id: int
    technician_id: int
    assigned_at: datetime
    assigned_by: str
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    reason: str | None = None

    def is_active(self) -> bool:
        return self.status == AssignmentStatus.ACTIVE

    def mark_reassigned(self, reason: str | None) -> None:
        self.status = AssignmentStatus.REASSIGNED
        self.reason = reason

    def mark_completed(self) -> None:
        self.status = AssignmentStatus.COMPLETED
