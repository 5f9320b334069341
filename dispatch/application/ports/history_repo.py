"""Port interface for the assignment audit trail.

Append-only: no update or delete.
"""

from abc import ABC, abstractmethod

from dispatch.domain.entities.assignment_history import AssignmentHistory


class AssignmentHistoryRepository(ABC):
    @abstractmethod
    async def append(self, entry: AssignmentHistory) -> AssignmentHistory:
        """Persist *entry* and return it with its id set."""
        ...

    @abstractmethod
    async def list_for_task(self, task_id: int) -> list[AssignmentHistory]:
        """History rows for a task in chronological order."""
        ...
