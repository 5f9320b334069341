"""Technician endpoints — the caller's own task list."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from dispatch.application.use_cases.task_assignment import TaskAssignmentService
from dispatch.domain.value_objects.principal import Principal
from dispatch.infrastructure.api.dependencies import get_principal, get_task_service
from dispatch.infrastructure.api.routes_tasks import serialize_technician_task

router = APIRouter(prefix="/technicians", tags=["technicians"])


@router.get("/me/tasks")
async def my_tasks(
    status: str = Query(default="all"),
    principal: Principal | None = Depends(get_principal),
    service: TaskAssignmentService = Depends(get_task_service),
):
    """Tasks assigned to the calling technician, HIGH priority first."""
    views = await service.list_technician_tasks(principal, status)
    return {
        "tasks": [serialize_technician_task(v) for v in views],
        "totalTasks": len(views),
    }
