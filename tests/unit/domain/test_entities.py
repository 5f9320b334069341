"""Tests for domain entities."""

from datetime import datetime, timezone

import pytest

from dispatch.domain.entities.assignment import Assignment
from dispatch.domain.entities.assignment_history import AssignmentHistory
from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.entities.technician import TechnicianInfo
from dispatch.domain.errors import InvalidTask
from dispatch.domain.value_objects.enums import (
    AssignmentStatus,
    HistoryAction,
    Priority,
    Role,
    TaskStatus,
    TechnicianStatus,
)
from dispatch.domain.value_objects.principal import Principal

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)

# ─── ServiceTask ─────────────────────────────────────────────────────


def test_new_task_is_unassigned():
    t = ServiceTask.new("Fix boiler", "12 Elm St", Priority.HIGH, created_by="dispatcher1")
    assert t.status == TaskStatus.UNASSIGNED
    assert t.assigned_technician_id is None
    assert t.created_by == "dispatcher1"
    assert t.created_at is not None
    assert t.id is None


def test_new_task_strips_title_and_address():
    t = ServiceTask.new("  Fix boiler  ", "  12 Elm St ", Priority.LOW, created_by="d")
    assert t.title == "Fix boiler"
    assert t.client_address == "12 Elm St"


def test_new_task_accepts_priority_string():
    t = ServiceTask.new("Fix boiler", "12 Elm St", "MEDIUM", created_by="d")
    assert t.priority is Priority.MEDIUM


@pytest.mark.parametrize("title", ["", "   ", "ab", "x" * 201])
def test_new_task_rejects_bad_title(title):
    with pytest.raises(InvalidTask):
        ServiceTask.new(title, "12 Elm St", Priority.HIGH, created_by="d")


def test_new_task_accepts_title_bounds():
    assert ServiceTask.new("abc", "addr", Priority.HIGH, created_by="d").title == "abc"
    assert len(ServiceTask.new("x" * 200, "addr", Priority.HIGH, created_by="d").title) == 200


def test_new_task_rejects_blank_address():
    with pytest.raises(InvalidTask, match="address"):
        ServiceTask.new("Fix boiler", "  ", Priority.HIGH, created_by="d")


@pytest.mark.parametrize("duration", [0, -15])
def test_new_task_rejects_non_positive_duration(duration):
    with pytest.raises(InvalidTask):
        ServiceTask.new("Fix boiler", "addr", Priority.HIGH, created_by="d", estimated_duration=duration)


def test_task_is_assigned_to():
    t = ServiceTask(
        id=1, title="Fix", description=None, client_address="a",
        priority=Priority.LOW, status=TaskStatus.ASSIGNED, assigned_technician_id=7,
    )
    assert t.is_assigned_to(7)
    assert not t.is_assigned_to(8)
    assert not t.is_assigned_to(None)


# ─── Assignment / history ────────────────────────────────────────────


def _assignment(**kw):
    base = dict(id=5, task_id=1, technician_id=7, assigned_at=NOW, assigned_by="d")
    base.update(kw)
    return Assignment(**base)


def test_assignment_defaults_to_active():
    assert _assignment().is_active()


def test_assignment_mark_reassigned_keeps_reason():
    a = _assignment()
    a.mark_reassigned("Technician sick")
    assert a.status == AssignmentStatus.REASSIGNED
    assert a.reason == "Technician sick"
    assert not a.is_active()


def test_assignment_mark_completed():
    a = _assignment()
    a.mark_completed()
    assert a.status == AssignmentStatus.COMPLETED


def test_history_for_creation_has_no_previous_technician():
    h = AssignmentHistory.for_creation(_assignment(), "d", NOW)
    assert h.action == HistoryAction.CREATED
    assert h.previous_technician_id is None
    assert h.assignment_id == 5
    assert h.task_id == 1


def test_history_for_reassignment_records_previous():
    h = AssignmentHistory.for_reassignment(_assignment(technician_id=9), 7, "d", NOW, "swap")
    assert h.action == HistoryAction.REASSIGNED
    assert h.technician_id == 9
    assert h.previous_technician_id == 7
    assert h.reason == "swap"


def test_history_rows_are_immutable():
    h = AssignmentHistory.for_creation(_assignment(), "d", NOW)
    with pytest.raises(AttributeError):
        h.reason = "rewritten"


# ─── Technician / principal ──────────────────────────────────────────


def test_technician_is_active():
    assert TechnicianInfo(id=1, name="A", status=TechnicianStatus.ACTIVE).is_active()
    assert not TechnicianInfo(id=1, name="A", status=TechnicianStatus.INACTIVE).is_active()


def test_principal_roles():
    p = Principal(user_id="1", username="boss", roles=frozenset({Role.ADMIN}))
    assert p.is_admin()
    assert not p.has_role(Role.DISPATCHER)
