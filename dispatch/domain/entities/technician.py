"""Technician read model — what the identity service tells us about a technician."""

from dataclasses import dataclass

from dispatch.domain.value_objects.enums import TechnicianStatus


@dataclass(frozen=True)
class TechnicianInfo:
    id: int
    name: str
    status: TechnicianStatus
    device_token: str | None = None

    def is_active(self) -> bool:
        return self.status == TechnicianStatus.ACTIVE
