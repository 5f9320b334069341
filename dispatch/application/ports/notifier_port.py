"""Port interface for push notification delivery."""

from abc import ABC, abstractmethod

from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.entities.technician import TechnicianInfo


class NotifierPort(ABC):
    @abstractmethod
    async def notify_task_assigned(self, technician: TechnicianInfo, task: ServiceTask) -> bool:
        """Tell *technician* about a newly assigned *task*.

        Fire-and-forget contract: implementations return False on any
        failure and never raise.
        """
        ...
