"""Tests for the health and metrics endpoints."""

import pytest


@pytest.mark.asyncio
async def test_health_ping(test_client):
    response = await test_client.post("/v1/health/ping")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["service"] == "tour-crm-api"
    assert data["workers"] == {"retention_archive": False, "retention_purge": False}
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_request_id_is_echoed(test_client):
    response = await test_client.post("/v1/health/ping", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client):
    await test_client.post("/v1/health/ping")

    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "http_requests_total" in response.text
    assert "quotations_transitioned_total" in response.text
    assert "rate_overlaps_rejected_total" in response.text
