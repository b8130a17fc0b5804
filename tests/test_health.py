"""Health check endpoint."""
from datetime import datetime

from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient, upstream):
    r = client.get("/health")
    assert r.status_code == 200
    j = r.json()
    assert j.get("status") == "OK"
    assert j.get("environment") == "test"
    assert j["timestamp"] == "2026-01-15T12:00:00.000Z"
    datetime.fromisoformat(j["timestamp"].replace("Z", "+00:00"))
    # Upstream'e gidilmez
    assert upstream.requests == []


def test_health_independent_of_upstream(client: TestClient, upstream):
    def _down(request):
        raise AssertionError("health must not call QPay")

    upstream.respond = _down
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "OK"


def test_request_id_header(client: TestClient):
    r = client.get("/health")
    assert r.headers.get("X-Request-ID")
