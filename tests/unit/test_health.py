from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import orderdesk.infrastructure.container as container_module
from orderdesk.api.main import app
from orderdesk.infrastructure.container import get_container


@pytest.fixture()
def memory_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("MEMORY_SEED", "0")
    for name in ("DATABASE_URL", "REDIS_URL", "MEMORY_SNAPSHOT_PATH"):
        monkeypatch.delenv(name, raising=False)
    get_container.cache_clear()
    yield monkeypatch
    get_container.cache_clear()


def test_live_health_endpoint(memory_env) -> None:
    with TestClient(app) as client:
        response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_health_endpoint_memory_backend(memory_env) -> None:
    with TestClient(app) as client:
        response = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "checks": {"memory": True}}


def test_ready_health_endpoint_reports_redis_down(memory_env) -> None:
    with TestClient(app) as client:
        memory_env.setattr(container_module, "redis_url", lambda: "redis://cache:6379/0")
        memory_env.setattr(container_module, "ping_redis", lambda timeout_seconds=1.0: False)
        response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {
        "status": "unavailable",
        "checks": {"memory": True, "redis": False},
    }


def test_metrics_endpoint_exposes_request_counter(memory_env) -> None:
    with TestClient(app) as client:
        client.get("/health/live")
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
