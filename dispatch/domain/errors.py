"""Domain error taxonomy.

Every error carries the HTTP status it maps to so the API layer can render
all of them with one handler.
"""

from __future__ import annotations


class DispatchError(Exception):
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TaskNotFound(DispatchError):
    status_code = 404

    def __init__(self, task_id: int):
        super().__init__(f"Task not found with ID: {task_id}")
        self.task_id = task_id


class InvalidTask(DispatchError):
    status_code = 400


class InvalidAssignment(DispatchError):
    status_code = 400


class InvalidStatusTransition(DispatchError):
    status_code = 400


class UnauthorizedTaskAccess(DispatchError):
    status_code = 403


class Unauthenticated(DispatchError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(DispatchError):
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class TechnicianValidationFailed(DispatchError):
    """Raised when a technician cannot be confirmed as existing and active.

    ``upstream`` distinguishes a failing identity service (502) from a
    definitive negative answer (400).
    """

    def __init__(self, technician_id: int, detail: str, upstream: bool = False):
        super().__init__(f"Technician {technician_id} {detail}")
        self.technician_id = technician_id
        self.upstream = upstream
        self.status_code = 502 if upstream else 400
