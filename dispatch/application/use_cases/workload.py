"""WorkloadCalculator — count a technician's active assignments."""

from __future__ import annotations

import logging
from collections.abc import Callable

from dispatch.application.ports.unit_of_work import UnitOfWork
from dispatch.domain.policies.workload_policy import (
    DEFAULT_WORKLOAD_THRESHOLD,
    workload_warning,
)

logger = logging.getLogger(__name__)


class WorkloadCalculator:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        threshold: int = DEFAULT_WORKLOAD_THRESHOLD,
    ):
        self._uow_factory = uow_factory
        self.threshold = threshold

    async def workload_of(self, technician_id: int) -> int:
        async with self._uow_factory() as uow:
            workload = await uow.assignments.count_active_for_technician(technician_id)
        logger.info("Technician %d current workload: %d active assignments", technician_id, workload)
        return workload

    def warning_for(self, workload: int, subject: str = "Technician") -> str | None:
        return workload_warning(workload, self.threshold, subject)
