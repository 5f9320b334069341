"""Request bodies — camelCase on the wire, snake_case in Python."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from dispatch.domain.value_objects.enums import Priority, TaskStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateTaskRequest(CamelModel):
    title: str
    description: str | None = None
    client_address: str
    priority: Priority
    estimated_duration: int | None = None


class AssignTaskRequest(CamelModel):
    technician_id: int


class ReassignTaskRequest(CamelModel):
    new_technician_id: int
    reason: str | None = None


class UpdateStatusRequest(CamelModel):
    status: TaskStatus
