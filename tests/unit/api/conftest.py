from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderdesk.api.main import app
from orderdesk.infrastructure.container import get_container

_UNSET = (
    "DATABASE_URL",
    "REDIS_URL",
    "SLACK_BOT_TOKEN",
    "SLACK_CHANNEL_ID",
    "MEMORY_SNAPSHOT_PATH",
    "ORDER_NUMBER_PREFIX",
)


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("MEMORY_SEED", "0")
    for name in _UNSET:
        monkeypatch.delenv(name, raising=False)
    get_container.cache_clear()
    with TestClient(app) as test_client:
        yield test_client
    get_container.cache_clear()


@pytest.fixture()
def menu(client: TestClient) -> dict[str, int]:
    ids: dict[str, int] = {}
    for name, price in (("곰탕", 140000), ("보쌈", 400000)):
        response = client.post("/menu", json={"name": name, "price": price})
        assert response.status_code == 201
        ids[name] = response.json()["id"]
    return ids
