"""
tests/test_health.py -- Integration tests for GET /api/health.

Covers:
  - 200 with status, timestamp and one connected/disconnected entry per store
  - Session store outage shows up as redis: disconnected, still 200
  - No authentication required
"""

from __future__ import annotations

from datetime import datetime


def test_health_reports_every_store(api_client):
    """Health endpoint returns 200 with each backing store connected."""
    resp = api_client.client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["redis"] == "connected"
    assert data["users_db"] == "connected"
    assert data["movies_db"] == "connected"
    assert datetime.fromisoformat(data["timestamp"])


def test_health_reports_redis_outage(api_client):
    """A down session store is reported, not raised."""
    api_client.redis.fail = True
    try:
        resp = api_client.client.get("/api/health")
    finally:
        api_client.redis.fail = False
    assert resp.status_code == 200
    assert resp.json()["redis"] == "disconnected"
    assert resp.json()["users_db"] == "connected"


def test_health_no_auth_required(api_client):
    """Health endpoint is accessible without any authentication headers."""
    resp = api_client.client.get("/api/health", headers={})
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_security_headers_present(api_client):
    resp = api_client.client.get("/api/health")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert "strict-transport-security" not in resp.headers, "HSTS only applies over https"
