"""Concurrent assign / reassign calls against the same task."""

from __future__ import annotations

import asyncio

import pytest

from dispatch.application.use_cases.validate_technician import TechnicianValidator
from dispatch.domain.value_objects.enums import AssignmentStatus, HistoryAction, TaskStatus
from tests.fakes import SlowDirectory, dispatcher


@pytest.fixture
def slow_service(make_service):
    return make_service(validator=TechnicianValidator(SlowDirectory(delay=0.05), timeout_seconds=0.5))


def _active(store, task_id):
    return [
        a for a in store.assignments.values()
        if a.task_id == task_id and a.status == AssignmentStatus.ACTIVE
    ]


@pytest.mark.asyncio
async def test_concurrent_assigns_leave_one_active_assignment(slow_service, store, boiler_repair):
    task = await slow_service.create(dispatcher(), boiler_repair)

    results = await asyncio.gather(
        slow_service.assign(dispatcher(), task.id, 101),
        slow_service.assign(dispatcher(), task.id, 102),
    )

    active = _active(store, task.id)
    assert len(active) == 1
    assert len(store.assignments) == 2
    assert {r.assignment.technician_id for r in results} == {101, 102}
    assert store.tasks[task.id].status == TaskStatus.ASSIGNED
    assert store.tasks[task.id].assigned_technician_id == active[0].technician_id

    history = [h for h in store.history if h.task_id == task.id]
    assert [h.action for h in history] == [HistoryAction.CREATED, HistoryAction.REASSIGNED]
    assert history[1].previous_technician_id == history[0].technician_id
    assert history[1].technician_id == active[0].technician_id
    await slow_service.wait_for_notifications()


@pytest.mark.asyncio
async def test_concurrent_reassigns_chain_through_the_history(slow_service, store, boiler_repair):
    task = await slow_service.create(dispatcher(), boiler_repair)
    await slow_service.assign(dispatcher(), task.id, 101)

    await asyncio.gather(
        slow_service.reassign(dispatcher(), task.id, 102),
        slow_service.reassign(dispatcher(), task.id, 103),
        slow_service.list_tasks(dispatcher()),
    )

    active = _active(store, task.id)
    assert len(active) == 1
    assert [a.status for a in store.assignments.values()].count(AssignmentStatus.REASSIGNED) == 2

    history = [h for h in store.history if h.task_id == task.id]
    assert [h.action for h in history] == [
        HistoryAction.CREATED,
        HistoryAction.REASSIGNED,
        HistoryAction.REASSIGNED,
    ]
    # Each reassignment starts from whoever held the task just before it
    assert history[1].previous_technician_id == 101
    assert history[2].previous_technician_id == history[1].technician_id
    assert history[2].technician_id == active[0].technician_id
    await slow_service.wait_for_notifications()
