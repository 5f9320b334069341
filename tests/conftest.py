"""Pytest configuration and shared fixtures."""

import pytest

from dispatch.application.use_cases.task_assignment import NewTask, TaskAssignmentService
from dispatch.application.use_cases.validate_technician import TechnicianValidator
from dispatch.application.use_cases.workload import WorkloadCalculator
from dispatch.domain.entities.technician import TechnicianInfo
from dispatch.domain.value_objects.enums import Priority, TechnicianStatus
from tests.fakes import (
    FakeClock,
    FakeNotifier,
    FakeTechnicianDirectory,
    InMemoryStore,
    active_technician,
    uow_factory_for,
)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def directory():
    return FakeTechnicianDirectory(
        [
            active_technician(101),
            active_technician(102),
            active_technician(103, device_token=None),
            TechnicianInfo(id=199, name="Retired Tech", status=TechnicianStatus.INACTIVE),
        ]
    )


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_service(store, clock, directory, notifier):
    def _make(**overrides):
        uow_factory = uow_factory_for(store)
        kwargs = {
            "uow_factory": uow_factory,
            "validator": TechnicianValidator(directory, timeout_seconds=0.2),
            "workload": WorkloadCalculator(uow_factory, threshold=10),
            "notifier": notifier,
            "clock": clock,
        }
        kwargs.update(overrides)
        return TaskAssignmentService(**kwargs)

    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def boiler_repair():
    return NewTask(
        title="Boiler repair",
        client_address="12 Elm Street, Springfield",
        priority=Priority.HIGH,
        description="No hot water since Monday",
        estimated_duration=90,
    )
