"""Port interface for assignment persistence."""

from abc import ABC, abstractmethod

from dispatch.domain.entities.assignment import Assignment


class AssignmentRepository(ABC):
    @abstractmethod
    async def add(self, assignment: Assignment) -> Assignment:
        ...

    @abstractmethod
    async def update(self, assignment: Assignment) -> Assignment:
        ...

    @abstractmethod
    async def get_active_for_task(self, task_id: int) -> Assignment | None:
        ...

    @abstractmethod
    async def get_by_task(self, task_id: int) -> list[Assignment]:
        """All assignments of a task, oldest first."""
        ...

    @abstractmethod
    async def count_active_for_technician(self, technician_id: int) -> int:
        ...
