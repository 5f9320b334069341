"""Identity service adapter — implements TechnicianDirectory over HTTP."""

from __future__ import annotations

import logging

import httpx

from dispatch.application.ports.technician_directory import (
    TechnicianDirectory,
    TechnicianDirectoryUnavailable,
)
from dispatch.config import settings
from dispatch.domain.entities.technician import TechnicianInfo
from dispatch.domain.value_objects.enums import TechnicianStatus

logger = logging.getLogger(__name__)

USERS_PATH = "/api/users/{technician_id}"


class HttpTechnicianDirectory(TechnicianDirectory):
    """Looks technicians up via ``GET {base_url}/api/users/{id}``."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.identity_service_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.technician_validation_timeout
        self._transport = transport

    async def get_technician(self, technician_id: int) -> TechnicianInfo | None:
        url = self._base_url + USERS_PATH.format(technician_id=technician_id)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error("Identity service unreachable for technician %d: %s", technician_id, e)
            raise TechnicianDirectoryUnavailable(str(e)) from e

        if response.status_code == 404:
            logger.info("Technician %d not found in identity service", technician_id)
            return None
        if response.is_error:
            logger.error(
                "Identity service returned %d for technician %d",
                response.status_code, technician_id,
            )
            raise TechnicianDirectoryUnavailable(f"HTTP {response.status_code}")

        try:
            body = response.json()
            return TechnicianInfo(
                id=int(body.get("id", technician_id)),
                name=body.get("name") or "",
                status=_parse_status(body.get("status")),
                device_token=body.get("deviceToken"),
            )
        except (ValueError, TypeError, AttributeError) as e:
            logger.error("Malformed identity response for technician %d: %s", technician_id, e)
            raise TechnicianDirectoryUnavailable("malformed response") from e


def _parse_status(raw) -> TechnicianStatus:
    # Anything other than ACTIVE (SUSPENDED, DELETED, ...) cannot take work
    if str(raw or "").upper() == TechnicianStatus.ACTIVE.value:
        return TechnicianStatus.ACTIVE
    return TechnicianStatus.INACTIVE
