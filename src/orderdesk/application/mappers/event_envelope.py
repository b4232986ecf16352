from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from orderdesk.application.mappers.order_mapper import to_order_response
from orderdesk.domain.order.events import (
    ORDER_PLACED,
    ORDER_STATUS_CHANGED,
    OrderPlaced,
    OrderStatusChanged,
)


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_order_placed(
    event: OrderPlaced,
    *,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type=ORDER_PLACED,
        occurred_at=event.occurred_at,
        trace_id=trace_id,
        request_id=request_id,
        payload={"order": to_order_response(event.order).model_dump(mode="json")},
    )


def serialize_order_status_changed(
    event: OrderStatusChanged,
    *,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type=ORDER_STATUS_CHANGED,
        occurred_at=event.occurred_at,
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "order": to_order_response(event.order).model_dump(mode="json"),
            "previousStatus": event.previous_status.value,
            "status": event.order.status.value,
        },
    )


def parse_envelope(message: str) -> dict[str, Any]:
    envelope = json.loads(message)
    if not isinstance(envelope, dict):
        raise ValueError("event envelope must be a JSON object")
    if not isinstance(envelope.get("event_type"), str):
        raise ValueError("event envelope is missing event_type")
    if not isinstance(envelope.get("payload"), dict):
        raise ValueError("event envelope is missing payload")
    return envelope
