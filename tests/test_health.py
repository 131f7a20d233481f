"""
Health endpoint tests using pytest-asyncio and httpx.AsyncClient.
"""

import pytest


@pytest.mark.asyncio
async def test_health_endpoint(test_client):
    """Test the health check endpoint returns expected structure."""
    response = await test_client.get("/api/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "ok"
    assert data["uptime"].startswith("PT")
    assert "timestamp" in data
    assert data["checks"] == {"database": "ok"}


@pytest.mark.asyncio
async def test_root_health_endpoint(test_client):
    """The root-level alias answers the same payload."""
    response = await test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_health_degraded_when_storage_closed(test_client, storage):
    """A closed storage engine reports the database check as failing."""
    await storage.close()

    response = await test_client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"] == "error"
