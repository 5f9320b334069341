"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch.adapters.persistence.database import get_session
from dispatch.application.use_cases.task_assignment import TaskAssignmentService
from dispatch.config import settings
from dispatch.infrastructure.api.dependencies import get_task_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    service: TaskAssignmentService = Depends(get_task_service),
):
    """Database connectivity plus the state of the outbound integrations."""
    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.warning("Health check could not reach the database: %s", e)
        db_status = f"error: {e}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "service": "Dispatch - Task Assignment & Lifecycle Engine",
        "technicianValidation": "enabled" if settings.technician_validation_enabled else "disabled",
        "notifications": "enabled" if settings.notification_enabled else "disabled",
        "pendingNotifications": service.pending_notifications,
    }
