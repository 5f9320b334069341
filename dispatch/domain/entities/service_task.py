"""ServiceTask entity — a unit of field work dispatched to a technician."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from dispatch.domain.errors import InvalidTask
from dispatch.domain.value_objects.enums import Priority, TaskStatus

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200


@dataclass
class ServiceTask:
    id: int | None
    title: str
    description: str | None
    client_address: str
    priority: Priority
    estimated_duration: int | None = None
    status: TaskStatus = TaskStatus.UNASSIGNED
    assigned_technician_id: int | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None

    @classmethod
    def new(
        cls,
        title: str,
        client_address: str,
        priority: Priority,
        created_by: str,
        description: str | None = None,
        estimated_duration: int | None = None,
    ) -> ServiceTask:
        """Build a fresh UNASSIGNED task, rejecting invalid field values."""
        title = (title or "").strip()
        if not title:
            raise InvalidTask("Title is required")
        if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
            raise InvalidTask(
                f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
            )
        if not client_address or not client_address.strip():
            raise InvalidTask("Client address is required")
        if estimated_duration is not None and estimated_duration <= 0:
            raise InvalidTask("Estimated duration must be positive")

        return cls(
            id=None,
            title=title,
            description=description,
            client_address=client_address.strip(),
            priority=Priority(priority),
            estimated_duration=estimated_duration,
            status=TaskStatus.UNASSIGNED,
            created_by=created_by,
            created_at=datetime.now(timezone.utc),
        )

    def is_assigned_to(self, technician_id: int | None) -> bool:
        return technician_id is not None and self.assigned_technician_id == technician_id

    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
