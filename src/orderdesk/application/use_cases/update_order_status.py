from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from orderdesk.application.dto.responses import OrderResponse
from orderdesk.application.errors import ConflictError, InvalidTransitionError, OrderNotFoundError
from orderdesk.application.mappers.event_envelope import serialize_order_status_changed
from orderdesk.application.mappers.order_mapper import to_order_response
from orderdesk.application.metrics.order_lifecycle import (
    record_publish_failure,
    record_rejection,
    record_transition,
)
from orderdesk.application.ports.publisher import ORDER_EVENTS_CHANNEL, EventPublisher
from orderdesk.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from orderdesk.application.use_cases.context import NO_TRACE, TraceContext
from orderdesk.domain.common.ids import OrderId
from orderdesk.domain.order.entities import Order, OrderStatus, OrderTransitionError
from orderdesk.domain.order.events import ORDER_STATUS_CHANGED, OrderStatusChanged

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UpdateOrderStatus:
    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        trace_ctx: TraceContext = NO_TRACE,
    ) -> OrderResponse:
        order = self._load(order_id)
        if order.status == new_status and not order.status.is_terminal:
            return to_order_response(order)

        now = self._clock()
        updated = self._ensure_transition(order, new_status, now)
        try:
            persisted = self._order_repository.update_status(
                order_id=order.order_id,
                new_status=updated.status,
                updated_at=now,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError:
            current = self._load(order_id)
            if current.status == new_status and not current.status.is_terminal:
                return to_order_response(current)
            self._ensure_transition(current, new_status, now)
            raise ConflictError(f"order {order_id} status update conflict")

        record_transition(from_status=order.status, to_status=persisted.status)
        logger.info(
            "order_status_changed",
            extra={
                "order_id": int(persisted.order_id),
                "order_number": str(persisted.order_number),
                "from_status": order.status.value,
                "status": persisted.status.value,
            },
        )

        message = serialize_order_status_changed(
            OrderStatusChanged(order=persisted, previous_status=order.status, occurred_at=now),
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        try:
            self._publisher.publish(channel=ORDER_EVENTS_CHANNEL, message=message)
        except Exception:
            record_publish_failure(ORDER_STATUS_CHANGED)
            logger.warning(
                "order_event_publish_failed",
                exc_info=True,
                extra={
                    "order_number": str(persisted.order_number),
                    "event_type": ORDER_STATUS_CHANGED,
                },
            )

        return to_order_response(persisted)

    def _load(self, order_id: OrderId) -> Order:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return order

    def _ensure_transition(self, order: Order, new_status: OrderStatus, now: datetime) -> Order:
        try:
            return order.transition_to(new_status, now)
        except OrderTransitionError as exc:
            record_rejection("invalid_transition")
            raise InvalidTransitionError(
                str(exc),
                details={"from": order.status.value, "to": new_status.value},
            ) from exc
