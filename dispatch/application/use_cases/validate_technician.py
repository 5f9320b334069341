"""TechnicianValidator — confirm a technician exists and is active before assigning."""

from __future__ import annotations

import asyncio
import logging

from dispatch.application.ports.technician_directory import (
    TechnicianDirectory,
    TechnicianDirectoryUnavailable,
)
from dispatch.domain.entities.technician import TechnicianInfo
from dispatch.domain.errors import TechnicianValidationFailed
from dispatch.domain.value_objects.enums import TechnicianStatus

logger = logging.getLogger(__name__)


class TechnicianValidator:
    """Precondition check against the identity store.

    Any failure (not found, inactive, unreachable, timed out) raises
    TechnicianValidationFailed. No retries, and it must run before the
    assignment transaction is opened.
    """

    def __init__(
        self,
        directory: TechnicianDirectory,
        timeout_seconds: float = 5.0,
        enabled: bool = True,
    ):
        self._directory = directory
        self._timeout = timeout_seconds
        self._enabled = enabled

    async def validate(self, technician_id: int) -> TechnicianInfo:
        if not self._enabled:
            logger.debug(
                "Technician validation is disabled, skipping lookup for technician %d",
                technician_id,
            )
            return TechnicianInfo(
                id=technician_id, name=f"technician-{technician_id}",
                status=TechnicianStatus.ACTIVE,
            )

        logger.info("Validating technician %d", technician_id)
        try:
            info = await asyncio.wait_for(
                self._directory.get_technician(technician_id), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Identity lookup for technician %d timed out after %.1fs",
                technician_id, self._timeout,
            )
            raise TechnicianValidationFailed(
                technician_id, "could not be validated - identity service timed out",
                upstream=True,
            ) from exc
        except TechnicianDirectoryUnavailable as exc:
            logger.error("Identity lookup for technician %d failed: %s", technician_id, exc)
            raise TechnicianValidationFailed(
                technician_id, "could not be validated - identity service unavailable",
                upstream=True,
            ) from exc

        if info is None:
            logger.warning("Technician not found in identity service: %d", technician_id)
            raise TechnicianValidationFailed(technician_id, "not found")
        if not info.is_active():
            logger.warning("Technician %d is not active (status: %s)", technician_id, info.status.value)
            raise TechnicianValidationFailed(technician_id, "is not active")

        logger.info("Technician %d validated: %s", technician_id, info.name)
        return info
