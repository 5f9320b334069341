"""Notification service adapter — implements NotifierPort over HTTP."""

from __future__ import annotations

import json
import logging

import httpx

from dispatch.application.ports.notifier_port import NotifierPort
from dispatch.config import settings
from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.entities.technician import TechnicianInfo

logger = logging.getLogger(__name__)

SEND_PATH = "/api/notifications/send"
ASSIGNED_TITLE = "New Task Assigned"


def build_assignment_payload(technician: TechnicianInfo, task: ServiceTask) -> dict:
    """Request body for the "task assigned" push."""
    return {
        "userId": technician.id,
        "deviceToken": technician.device_token,
        "title": ASSIGNED_TITLE,
        "message": (
            f"Task: {task.title}\n"
            f"Priority: {task.priority.value}\n"
            f"Location: {task.client_address}"
        ),
        "data": json.dumps(
            {
                "taskId": task.id,
                "taskTitle": task.title,
                "priority": task.priority.value,
                "clientAddress": task.client_address,
            }
        ),
    }


class HttpNotifier(NotifierPort):
    """Best-effort push delivery; every failure is logged and reported as False."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        enabled: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.notification_service_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.notification_timeout
        self._enabled = settings.notification_enabled if enabled is None else enabled
        self._transport = transport

    async def notify_task_assigned(self, technician: TechnicianInfo, task: ServiceTask) -> bool:
        if not self._enabled:
            logger.debug("Notifications disabled, skipping task %d", task.id)
            return False
        if not technician.device_token:
            logger.warning(
                "Technician %d has no device token, skipping notification for task %d",
                technician.id, task.id,
            )
            return False

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    self._base_url + SEND_PATH,
                    json=build_assignment_payload(technician, task),
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "Failed to notify technician %d about task %d: %s",
                technician.id, task.id, e,
            )
            return False

        logger.info("Notified technician %d about task %d", technician.id, task.id)
        return True
