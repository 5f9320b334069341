"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class TaskStatus(str, Enum):
    UNASSIGNED = "UNASSIGNED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Priority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Sort weight: HIGH outranks MEDIUM outranks LOW."""
        return {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}[self]


class AssignmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    REASSIGNED = "REASSIGNED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class HistoryAction(str, Enum):
    CREATED = "CREATED"
    REASSIGNED = "REASSIGNED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskOperation(str, Enum):
    ASSIGN = "ASSIGN"
    REASSIGN = "REASSIGN"
    START = "START"
    COMPLETE = "COMPLETE"


class Role(str, Enum):
    ADMIN = "ADMIN"
    DISPATCHER = "DISPATCHER"
    SUPERVISOR = "SUPERVISOR"
    TECHNICIAN = "TECHNICIAN"


class TechnicianStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
