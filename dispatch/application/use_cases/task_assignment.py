"""TaskAssignmentService — create, list, assign, reassign and progress service tasks.

Every public operation is wrapped by the authorization guard and takes the
caller's Principal as its first argument.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from dispatch.application.ports.notifier_port import NotifierPort
from dispatch.application.ports.task_repo import TaskPage, TaskQuery
from dispatch.application.ports.unit_of_work import UnitOfWork
from dispatch.application.use_cases.assignment_ledger import AssignmentLedger
from dispatch.application.use_cases.authorization import requires_roles
from dispatch.application.use_cases.validate_technician import TechnicianValidator
from dispatch.application.use_cases.workload import WorkloadCalculator
from dispatch.domain.entities.assignment import Assignment
from dispatch.domain.entities.assignment_history import AssignmentHistory
from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.entities.technician import TechnicianInfo
from dispatch.domain.errors import (
    InvalidStatusTransition,
    TaskNotFound,
    UnauthorizedTaskAccess,
)
from dispatch.domain.policies.task_lifecycle import TaskLifecycle
from dispatch.domain.value_objects.enums import Priority, Role, TaskOperation, TaskStatus
from dispatch.domain.value_objects.principal import Principal

logger = logging.getLogger(__name__)

TECHNICIAN_STATUS_FILTERS: dict[str, frozenset[TaskStatus] | None] = {
    "all": None,
    "assigned": frozenset({TaskStatus.ASSIGNED}),
    "in_progress": frozenset({TaskStatus.IN_PROGRESS}),
    "completed": frozenset({TaskStatus.COMPLETED}),
}


@dataclass
class NewTask:
    title: str
    client_address: str
    priority: Priority
    description: str | None = None
    estimated_duration: int | None = None


@dataclass
class AssignResult:
    assignment: Assignment
    task: ServiceTask
    technician_workload: int
    workload_warning: str | None = None


@dataclass
class ReassignResult:
    assignment: Assignment
    task: ServiceTask
    previous_technician_id: int | None
    reason: str | None
    new_technician_workload: int
    workload_warning: str | None
    history: list[AssignmentHistory]


@dataclass
class TechnicianTaskView:
    task: ServiceTask
    assigned_at: datetime | None = None


class TaskAssignmentService:
    """Orchestrates validator → ledger → lifecycle → workload → notification."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        validator: TechnicianValidator,
        ledger: AssignmentLedger | None = None,
        workload: WorkloadCalculator | None = None,
        notifier: NotifierPort | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._uow_factory = uow_factory
        self._validator = validator
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lifecycle = TaskLifecycle(clock=self._clock)
        self._ledger = ledger or AssignmentLedger(uow_factory, self._lifecycle, self._clock)
        self._workload = workload or WorkloadCalculator(uow_factory)
        self._notifier = notifier
        self._pending_notifications: set[asyncio.Task] = set()

    # ─── Dispatcher operations ─────────────────────────────────────────

    @requires_roles(Role.DISPATCHER)
    async def create(self, principal: Principal, new_task: NewTask) -> ServiceTask:
        logger.info("Creating new task with title '%s' by user %s", new_task.title, principal.username)
        task = ServiceTask.new(
            title=new_task.title,
            client_address=new_task.client_address,
            priority=new_task.priority,
            created_by=principal.username,
            description=new_task.description,
            estimated_duration=new_task.estimated_duration,
        )
        async with self._uow_factory() as uow:
            task = await uow.tasks.add(task)
            await uow.commit()
        logger.info("Task created successfully with ID %d", task.id)
        return task

    @requires_roles(Role.DISPATCHER, Role.SUPERVISOR, Role.TECHNICIAN)
    async def list_tasks(self, principal: Principal, query: TaskQuery | None = None) -> TaskPage:
        query = (query or TaskQuery()).normalized()
        logger.info(
            "Fetching tasks - status: %s, priority: %s, search: %s, sortBy: %s, sortOrder: %s, page: %d, pageSize: %d",
            query.status, query.priority, query.search,
            query.sort_by, query.sort_order, query.page, query.page_size,
        )
        async with self._uow_factory() as uow:
            tasks, total = await uow.tasks.search(query)
            counts = await uow.tasks.count_by_status()

        page = TaskPage(
            tasks=tasks,
            page=query.page,
            page_size=query.page_size,
            total_elements=total,
            status_counts={status.value: counts.get(status, 0) for status in TaskStatus},
        )
        logger.info("Found %d tasks (page %d of %d)", len(tasks), page.page + 1, page.total_pages)
        return page

    @requires_roles(Role.DISPATCHER)
    async def assign(self, principal: Principal, task_id: int, technician_id: int) -> AssignResult:
        logger.info("Assigning task %d to technician %d by user %s", task_id, technician_id, principal.username)
        await self._precheck(task_id, TaskOperation.ASSIGN)
        technician = await self._validator.validate(technician_id)

        entry = await self._ledger.record_assignment(
            task_id, technician_id, principal.username, operation=TaskOperation.ASSIGN
        )
        workload = await self._workload.workload_of(technician_id)
        self._dispatch_notification(technician, entry.task)

        return AssignResult(
            assignment=entry.assignment,
            task=entry.task,
            technician_workload=workload,
            workload_warning=self._workload.warning_for(workload),
        )

    @requires_roles(Role.DISPATCHER)
    async def reassign(
        self,
        principal: Principal,
        task_id: int,
        new_technician_id: int,
        reason: str | None = None,
    ) -> ReassignResult:
        logger.info(
            "Reassigning task %d to technician %d by user %s, reason: %s",
            task_id, new_technician_id, principal.username, reason,
        )
        await self._precheck(task_id, TaskOperation.REASSIGN, reason)
        technician = await self._validator.validate(new_technician_id)

        entry = await self._ledger.record_assignment(
            task_id, new_technician_id, principal.username,
            reason=reason, operation=TaskOperation.REASSIGN,
        )
        workload = await self._workload.workload_of(new_technician_id)
        history = await self._ledger.history_for(task_id)
        self._dispatch_notification(technician, entry.task)

        return ReassignResult(
            assignment=entry.assignment,
            task=entry.task,
            previous_technician_id=entry.previous_technician_id,
            reason=reason,
            new_technician_workload=workload,
            workload_warning=self._workload.warning_for(workload, subject="New technician"),
            history=history,
        )

    # ─── Technician operations ─────────────────────────────────────────

    @requires_roles(Role.TECHNICIAN)
    async def update_status(
        self, principal: Principal, task_id: int, status: TaskStatus
    ) -> TechnicianTaskView:
        technician_id = principal.technician_id
        logger.info("Updating task %d status to %s by technician %s", task_id, status.value, technician_id)

        async with self._uow_factory() as uow:
            task = await uow.tasks.get_for_update(task_id)
            if task is None:
                raise TaskNotFound(task_id)
            if not task.is_assigned_to(technician_id):
                logger.warning(
                    "Technician %s attempted to update task %d assigned to %s",
                    technician_id, task_id, task.assigned_technician_id,
                )
                raise UnauthorizedTaskAccess(
                    f"Task {task_id} is not assigned to the requesting technician"
                )

            if status == TaskStatus.IN_PROGRESS:
                self._lifecycle.start(task)
                await uow.tasks.update(task)
            elif status == TaskStatus.COMPLETED:
                await self._ledger.record_completion(uow, task, principal.username)
            else:
                raise InvalidStatusTransition(
                    f"Cannot change task {task_id} status from {task.status.value} to {status.value}"
                )

            assignments = await uow.assignments.get_by_task(task_id)
            await uow.commit()

        logger.info("Task %d is now %s", task_id, task.status.value)
        return TechnicianTaskView(task=task, assigned_at=_latest_assigned_at(assignments, technician_id))

    @requires_roles(Role.TECHNICIAN)
    async def list_technician_tasks(
        self, principal: Principal, status_filter: str = "all"
    ) -> list[TechnicianTaskView]:
        """The caller's tasks, HIGH priority first, hiding completions from earlier days."""
        technician_id = principal.technician_id
        if technician_id is None:
            raise UnauthorizedTaskAccess("Caller is not linked to a technician")

        key = (status_filter or "all").strip().lower()
        if key not in TECHNICIAN_STATUS_FILTERS:
            logger.warning("Unknown status filter '%s', using 'all'", status_filter)
            key = "all"
        wanted = TECHNICIAN_STATUS_FILTERS[key]
        today = self._clock().date()

        views = []
        async with self._uow_factory() as uow:
            for task in await uow.tasks.get_by_technician(technician_id):
                if wanted is not None and task.status not in wanted:
                    continue
                if task.is_completed() and task.completed_at and task.completed_at.date() < today:
                    continue
                assignments = await uow.assignments.get_by_task(task.id)
                views.append(
                    TechnicianTaskView(task=task, assigned_at=_latest_assigned_at(assignments, technician_id))
                )

        oldest = datetime.min.replace(tzinfo=timezone.utc)
        views.sort(key=lambda v: (-v.task.priority.rank, v.assigned_at or oldest))
        logger.info("Technician %d has %d tasks (filter: %s)", technician_id, len(views), key)
        return views

    # ─── Notifications ─────────────────────────────────────────────────

    @property
    def pending_notifications(self) -> int:
        return len(self._pending_notifications)

    async def wait_for_notifications(self) -> None:
        """Wait until every in-flight notification has finished."""
        if self._pending_notifications:
            await asyncio.gather(*self._pending_notifications, return_exceptions=True)

    def _dispatch_notification(self, technician: TechnicianInfo, task: ServiceTask) -> None:
        if self._notifier is None:
            return
        job = asyncio.create_task(self._notify(technician, task))
        self._pending_notifications.add(job)
        job.add_done_callback(self._pending_notifications.discard)

    async def _notify(self, technician: TechnicianInfo, task: ServiceTask) -> bool:
        try:
            return await self._notifier.notify_task_assigned(technician, task)
        except Exception:
            logger.exception(
                "Notification to technician %d for task %d failed. Assignment stands.",
                technician.id, task.id,
            )
            return False

    # ─── Helpers ───────────────────────────────────────────────────────

    async def _precheck(self, task_id: int, operation: TaskOperation, reason: str | None = None) -> None:
        """Fail fast before the (slow, external) technician lookup."""
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_by_id(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        self._ledger.check_preconditions(task, operation, reason)


def _latest_assigned_at(assignments: list[Assignment], technician_id: int | None) -> datetime | None:
    mine = [a.assigned_at for a in assignments if a.technician_id == technician_id]
    return max(mine) if mine else None
