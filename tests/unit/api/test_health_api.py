"""Health endpoint with the database session pointed at SQLite."""

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from dispatch.adapters.persistence.database import get_session
from dispatch.main import create_app


@pytest.mark.asyncio
async def test_health_reports_connected_database():
    factory = async_sessionmaker(create_async_engine("sqlite+aiosqlite:///:memory:"))

    async def _session():
        async with factory() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_session] = _session

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["database"] == "connected"
    assert resp.json()["technicianValidation"] == "enabled"
    assert resp.json()["notifications"] == "enabled"
    assert resp.json()["pendingNotifications"] == 0
