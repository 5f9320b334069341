"""FastAPI dependency injection — wires adapters into the task service."""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dispatch.adapters.identity.identity_client import HttpTechnicianDirectory
from dispatch.adapters.notification.notification_client import HttpNotifier
from dispatch.adapters.persistence.database import async_session_factory
from dispatch.adapters.persistence.unit_of_work import SqlUnitOfWork
from dispatch.adapters.security.jwt_tokens import decode_access_token
from dispatch.application.use_cases.task_assignment import TaskAssignmentService
from dispatch.application.use_cases.validate_technician import TechnicianValidator
from dispatch.application.use_cases.workload import WorkloadCalculator
from dispatch.config import settings
from dispatch.domain.value_objects.principal import Principal

_bearer = HTTPBearer(auto_error=False)


def _uow_factory() -> SqlUnitOfWork:
    return SqlUnitOfWork(async_session_factory)


# Singleton service (stateless apart from in-flight notifications)
_task_service = TaskAssignmentService(
    uow_factory=_uow_factory,
    validator=TechnicianValidator(
        HttpTechnicianDirectory(),
        timeout_seconds=settings.technician_validation_timeout,
        enabled=settings.technician_validation_enabled,
    ),
    workload=WorkloadCalculator(_uow_factory, threshold=settings.workload_threshold),
    notifier=HttpNotifier(),
)


def get_task_service() -> TaskAssignmentService:
    return _task_service


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Principal | None:
    """Caller identity from the Bearer token; None when no token was sent.

    An absent principal is rejected by the service's role guard, so public
    and protected routes share this dependency.
    """
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)
