"""Tests for HttpNotifier — payload shape and failure handling."""

import json

import httpx
import pytest

from dispatch.adapters.notification.notification_client import HttpNotifier
from dispatch.domain.entities.service_task import ServiceTask
from dispatch.domain.value_objects.enums import Priority, TaskStatus
from tests.fakes import active_technician


@pytest.fixture
def task():
    return ServiceTask(
        id=12, title="Boiler repair", description=None, client_address="12 Elm Street",
        priority=Priority.HIGH, status=TaskStatus.ASSIGNED, assigned_technician_id=101,
    )


def _notifier(handler, enabled=True):
    return HttpNotifier(
        base_url="http://notify.local", timeout=1.0, enabled=enabled,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_sends_assignment_push(task):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    sent = await _notifier(handler).notify_task_assigned(active_technician(101, "tok-1"), task)

    assert sent is True
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/api/notifications/send"
    body = json.loads(requests[0].content)
    assert body["userId"] == 101
    assert body["deviceToken"] == "tok-1"
    assert body["title"] == "New Task Assigned"
    assert body["message"] == "Task: Boiler repair\nPriority: HIGH\nLocation: 12 Elm Street"
    assert json.loads(body["data"]) == {
        "taskId": 12,
        "taskTitle": "Boiler repair",
        "priority": "HIGH",
        "clientAddress": "12 Elm Street",
    }


@pytest.mark.asyncio
async def test_skips_without_device_token(task):
    requests = []
    notifier = _notifier(lambda r: requests.append(r) or httpx.Response(200))

    assert await notifier.notify_task_assigned(active_technician(101, None), task) is False
    assert requests == []


@pytest.mark.asyncio
async def test_disabled_notifier_sends_nothing(task):
    requests = []
    notifier = _notifier(lambda r: requests.append(r) or httpx.Response(200), enabled=False)

    assert await notifier.notify_task_assigned(active_technician(101), task) is False
    assert requests == []


@pytest.mark.asyncio
async def test_server_error_returns_false(task):
    notifier = _notifier(lambda r: httpx.Response(500))
    assert await notifier.notify_task_assigned(active_technician(101), task) is False


@pytest.mark.asyncio
async def test_connection_error_returns_false(task):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    assert await _notifier(handler).notify_task_assigned(active_technician(101), task) is False
