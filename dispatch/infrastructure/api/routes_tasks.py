"""Task endpoints — create, list, assign, reassign, status updates."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from dispatch.application.ports.task_repo import DEFAULT_PAGE_SIZE, TaskPage, TaskQuery
from dispatch.application.use_cases.task_assignment import (
    AssignResult,
    NewTask,
    ReassignResult,
    TaskAssignmentService,
    TechnicianTaskView,
)
from dispatch.domain.entities.assignment_history import AssignmentHistory
from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.value_objects.enums import Priority, TaskStatus
from dispatch.domain.value_objects.principal import Principal
from dispatch.infrastructure.api.dependencies import get_principal, get_task_service
from dispatch.infrastructure.api.schemas import (
    AssignTaskRequest,
    CreateTaskRequest,
    ReassignTaskRequest,
    UpdateStatusRequest,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", status_code=201)
async def create_task(
    body: CreateTaskRequest,
    principal: Principal | None = Depends(get_principal),
    service: TaskAssignmentService = Depends(get_task_service),
):
    """Create a new UNASSIGNED task (DISPATCHER)."""
    task = await service.create(
        principal,
        NewTask(
            title=body.title,
            client_address=body.client_address,
            priority=body.priority,
            description=body.description,
            estimated_duration=body.estimated_duration,
        ),
    )
    return _serialize_task(task)


@router.get("")
async def list_tasks(
    status: TaskStatus | None = None,
    priority: Priority | None = None,
    search: str | None = None,
    sort_by: str = Query(default="priority", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    page: int = 0,
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
    principal: Principal | None = Depends(get_principal),
    service: TaskAssignmentService = Depends(get_task_service),
):
    """Filtered, sorted, paginated task list with per-status counts."""
    result = await service.list_tasks(
        principal,
        TaskQuery(
            status=status,
            priority=priority,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
        ),
    )
    return _serialize_page(result)


@router.post("/{task_id}/assign")
async def assign_task(
    task_id: int,
    body: AssignTaskRequest,
    principal: Principal | None = Depends(get_principal),
    service: TaskAssignmentService = Depends(get_task_service),
):
    result = await service.assign(principal, task_id, body.technician_id)
    return _serialize_assignment(result)


@router.post("/{task_id}/reassign")
async def reassign_task(
    task_id: int,
    body: ReassignTaskRequest,
    principal: Principal | None = Depends(get_principal),
    service: TaskAssignmentService = Depends(get_task_service),
):
    """Move a task to another technician; IN_PROGRESS tasks need a reason."""
    result = await service.reassign(principal, task_id, body.new_technician_id, body.reason)
    return _serialize_reassignment(result)


@router.patch("/{task_id}/status")
async def update_task_status(
    task_id: int,
    body: UpdateStatusRequest,
    principal: Principal | None = Depends(get_principal),
    service: TaskAssignmentService = Depends(get_task_service),
):
    view = await service.update_status(principal, task_id, body.status)
    return serialize_technician_task(view)


# ─── Serializers ─────────────────────────────────────────────────────


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _serialize_task(t: ServiceTask) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "clientAddress": t.client_address,
        "priority": t.priority.value,
        "estimatedDuration": t.estimated_duration,
        "status": t.status.value,
        "assignedTechnicianId": t.assigned_technician_id,
        "startedAt": _iso(t.started_at),
        "createdBy": t.created_by,
        "createdAt": _iso(t.created_at),
    }


def _serialize_page(p: TaskPage) -> dict:
    return {
        "tasks": [_serialize_task(t) for t in p.tasks],
        "page": p.page,
        "pageSize": p.page_size,
        "totalElements": p.total_elements,
        "totalPages": p.total_pages,
        "first": p.first,
        "last": p.last,
        "statusCounts": p.status_counts,
    }


def _serialize_assignment(r: AssignResult) -> dict:
    return {
        "assignmentId": r.assignment.id,
        "taskId": r.task.id,
        "technicianId": r.assignment.technician_id,
        "assignedAt": _iso(r.assignment.assigned_at),
        "assignedBy": r.assignment.assigned_by,
        "taskStatus": r.task.status.value,
        "technicianWorkload": r.technician_workload,
        "workloadWarning": r.workload_warning,
    }


def _serialize_history(h: AssignmentHistory) -> dict:
    return {
        "id": h.id,
        "technicianId": h.technician_id,
        "previousTechnicianId": h.previous_technician_id,
        "action": h.action.value,
        "actionBy": h.action_by,
        "actionAt": _iso(h.action_at),
        "reason": h.reason,
    }


def _serialize_reassignment(r: ReassignResult) -> dict:
    return {
        "assignmentId": r.assignment.id,
        "taskId": r.task.id,
        "previousTechnicianId": r.previous_technician_id,
        "newTechnicianId": r.assignment.technician_id,
        "reassignedAt": _iso(r.assignment.assigned_at),
        "reassignedBy": r.assignment.assigned_by,
        "reason": r.reason,
        "taskStatus": r.task.status.value,
        "newTechnicianWorkload": r.new_technician_workload,
        "workloadWarning": r.workload_warning,
        "assignmentHistory": [_serialize_history(h) for h in r.history],
    }


def serialize_technician_task(v: TechnicianTaskView) -> dict:
    """Technician-facing task shape, shared with the /technicians routes."""
    t = v.task
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "clientAddress": t.client_address,
        "priority": t.priority.value,
        "estimatedDuration": t.estimated_duration,
        "status": t.status.value,
        "assignedAt": _iso(v.assigned_at),
        "startedAt": _iso(t.started_at),
    }
