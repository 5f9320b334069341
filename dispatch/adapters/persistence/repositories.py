"""SQLAlchemy repository implementations."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch.adapters.persistence.models import (
    AssignmentHistoryModel,
    AssignmentModel,
    ServiceTaskModel,
)
from dispatch.application.ports.assignment_repo import AssignmentRepository
from dispatch.application.ports.history_repo import AssignmentHistoryRepository
from dispatch.application.ports.task_repo import TaskQuery, TaskRepository
from dispatch.domain.entities.assignment import Assignment
from dispatch.domain.entities.assignment_history import AssignmentHistory
from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.value_objects.enums import (
    AssignmentStatus,
    HistoryAction,
    Priority,
    TaskStatus,
)

# ─── Mappers ─────────────────────────────────────────────────────────


def _utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _task_to_domain(m: ServiceTaskModel) -> ServiceTask:
    return ServiceTask(
        id=m.id,
        title=m.title,
        description=m.description,
        client_address=m.client_address,
        priority=Priority(m.priority),
        estimated_duration=m.estimated_duration,
        status=TaskStatus(m.status),
        assigned_technician_id=m.assigned_technician_id,
        started_at=_utc(m.started_at),
        completed_at=_utc(m.completed_at),
        created_by=m.created_by,
        created_at=_utc(m.created_at),
    )


def _assignment_to_domain(m: AssignmentModel) -> Assignment:
    return Assignment(
        id=m.id,
        task_id=m.task_id,
        technician_id=m.technician_id,
        assigned_at=_utc(m.assigned_at),
        assigned_by=m.assigned_by,
        status=AssignmentStatus(m.status),
        reason=m.reason,
    )


def _history_to_domain(m: AssignmentHistoryModel) -> AssignmentHistory:
    return AssignmentHistory(
        id=m.id,
        assignment_id=m.assignment_id,
        task_id=m.task_id,
        technician_id=m.technician_id,
        previous_technician_id=m.previous_technician_id,
        action=HistoryAction(m.action),
        action_by=m.action_by,
        action_at=_utc(m.action_at),
        reason=m.reason,
    )


_PRIORITY_RANK = case(
    {p.value: p.rank for p in Priority},
    value=ServiceTaskModel.priority,
    else_=0,
)

_SORT_COLUMNS = {
    "priority": _PRIORITY_RANK,
    "createdAt": ServiceTaskModel.created_at,
    "status": ServiceTaskModel.status,
}


# ─── Repositories ────────────────────────────────────────────────────


class SqlTaskRepository(TaskRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def add(self, task: ServiceTask) -> ServiceTask:
        m = ServiceTaskModel(
            title=task.title,
            description=task.description,
            client_address=task.client_address,
            priority=task.priority.value,
            estimated_duration=task.estimated_duration,
            status=task.status.value,
            assigned_technician_id=task.assigned_technician_id,
            created_by=task.created_by,
            created_at=task.created_at or datetime.now(timezone.utc),
        )
        self._s.add(m)
        await self._s.flush()
        task.id = m.id
        task.created_at = _utc(m.created_at)
        return task

    async def get_by_id(self, task_id: int) -> ServiceTask | None:
        m = await self._s.get(ServiceTaskModel, task_id)
        return _task_to_domain(m) if m else None

    async def get_for_update(self, task_id: int) -> ServiceTask | None:
        result = await self._s.execute(
            select(ServiceTaskModel)
            .where(ServiceTaskModel.id == task_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one_or_none()
        return _task_to_domain(m) if m else None

    async def update(self, task: ServiceTask) -> ServiceTask:
        await self._s.execute(
            update(ServiceTaskModel)
            .where(ServiceTaskModel.id == task.id)
            .values(
                status=task.status.value,
                assigned_technician_id=task.assigned_technician_id,
                started_at=task.started_at,
                completed_at=task.completed_at,
            )
        )
        await self._s.flush()
        return task

    async def search(self, query: TaskQuery) -> tuple[list[ServiceTask], int]:
        conditions = []
        if query.status is not None:
            conditions.append(ServiceTaskModel.status == query.status.value)
        if query.priority is not None:
            conditions.append(ServiceTaskModel.priority == query.priority.value)
        if query.search:
            pattern = f"%{query.search.lower()}%"
            matches = [
                func.lower(ServiceTaskModel.title).like(pattern),
                func.lower(ServiceTaskModel.client_address).like(pattern),
            ]
            if query.search_id is not None:
                matches.append(ServiceTaskModel.id == query.search_id)
            conditions.append(or_(*matches))

        total = await self._s.scalar(
            select(func.count()).select_from(ServiceTaskModel).where(*conditions)
        )

        column = _SORT_COLUMNS.get(query.sort_by, _PRIORITY_RANK)
        primary = column.asc() if query.sort_order == "asc" else column.desc()
        result = await self._s.execute(
            select(ServiceTaskModel)
            .where(*conditions)
            .order_by(primary, ServiceTaskModel.created_at.desc(), ServiceTaskModel.id.desc())
            .offset(query.page * query.page_size)
            .limit(query.page_size)
        )
        return [_task_to_domain(m) for m in result.scalars()], total or 0

    async def count_by_status(self) -> dict[TaskStatus, int]:
        result = await self._s.execute(
            select(ServiceTaskModel.status, func.count()).group_by(ServiceTaskModel.status)
        )
        return {TaskStatus(status): count for status, count in result.all()}

    async def get_by_technician(self, technician_id: int) -> list[ServiceTask]:
        result = await self._s.execute(
            select(ServiceTaskModel)
            .where(ServiceTaskModel.assigned_technician_id == technician_id)
            .order_by(ServiceTaskModel.id)
        )
        return [_task_to_domain(m) for m in result.scalars()]


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def add(self, assignment: Assignment) -> Assignment:
        m = AssignmentModel(
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            assigned_at=assignment.assigned_at,
            assigned_by=assignment.assigned_by,
            status=assignment.status.value,
            reason=assignment.reason,
        )
        self._s.add(m)
        await self._s.flush()
        assignment.id = m.id
        return assignment

    async def update(self, assignment: Assignment) -> Assignment:
        await self._s.execute(
            update(AssignmentModel)
            .where(AssignmentModel.id == assignment.id)
            .values(status=assignment.status.value, reason=assignment.reason)
        )
        await self._s.flush()
        return assignment

    async def get_active_for_task(self, task_id: int) -> Assignment | None:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(
                AssignmentModel.task_id == task_id,
                AssignmentModel.status == AssignmentStatus.ACTIVE.value,
            )
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def get_by_task(self, task_id: int) -> list[Assignment]:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(AssignmentModel.task_id == task_id)
            .order_by(AssignmentModel.assigned_at, AssignmentModel.id)
            .execution_options(populate_existing=True)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def count_active_for_technician(self, technician_id: int) -> int:
        count = await self._s.scalar(
            select(func.count())
            .select_from(AssignmentModel)
            .where(
                AssignmentModel.technician_id == technician_id,
                AssignmentModel.status == AssignmentStatus.ACTIVE.value,
            )
        )
        return count or 0


class SqlAssignmentHistoryRepository(AssignmentHistoryRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def append(self, entry: AssignmentHistory) -> AssignmentHistory:
        m = AssignmentHistoryModel(
            assignment_id=entry.assignment_id,
            task_id=entry.task_id,
            technician_id=entry.technician_id,
            previous_technician_id=entry.previous_technician_id,
            action=entry.action.value,
            action_by=entry.action_by,
            action_at=entry.action_at,
            reason=entry.reason,
        )
        self._s.add(m)
        await self._s.flush()
        return dataclasses.replace(entry, id=m.id)

    async def list_for_task(self, task_id: int) -> list[AssignmentHistory]:
        result = await self._s.execute(
            select(AssignmentHistoryModel)
            .where(AssignmentHistoryModel.task_id == task_id)
            .order_by(AssignmentHistoryModel.action_at, AssignmentHistoryModel.id)
        )
        return [_history_to_domain(m) for m in result.scalars()]
