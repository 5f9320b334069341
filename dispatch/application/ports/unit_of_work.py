"""Port interface for a transactional unit of work.

One instance spans one database transaction. Usage::

    async with uow_factory() as uow:
        task = await uow.tasks.get_for_update(task_id)
        ...
        await uow.commit()

Leaving the block without ``commit()`` (or via an exception) discards every
write made through the repositories.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dispatch.application.ports.assignment_repo import AssignmentRepository
from dispatch.application.ports.history_repo import AssignmentHistoryRepository
from dispatch.application.ports.task_repo import TaskRepository


class UnitOfWork(ABC):
    tasks: TaskRepository
    assignments: AssignmentRepository
    history: AssignmentHistoryRepository

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
