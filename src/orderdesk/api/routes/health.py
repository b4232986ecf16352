from __future__ import annotations

from fastapi import APIRouter, Response, status

from orderdesk.infrastructure.container import get_container

router = APIRouter(tags=["health"])


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response) -> dict[str, object]:
    container = get_container()
    storage_ready = container.storage_ready()
    redis_ready = container.redis_ready()

    checks: dict[str, bool] = {container.backend: storage_ready}
    if redis_ready is not None:
        checks["redis"] = redis_ready

    if all(checks.values()):
        return {"status": "ok", "checks": checks}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unavailable", "checks": checks}
