from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from orderdesk.application.dto.requests import CreateOrderRequest, OrderDraftRequest
from orderdesk.application.dto.responses import OrderResponse
from orderdesk.application.errors import ValidationError, field_error
from orderdesk.application.mappers.event_envelope import serialize_order_placed
from orderdesk.application.mappers.order_mapper import to_order_response
from orderdesk.application.metrics.order_lifecycle import (
    record_order_created,
    record_publish_failure,
    record_rejection,
)
from orderdesk.application.ports.publisher import ORDER_EVENTS_CHANNEL, EventPublisher
from orderdesk.application.ports.repositories import (
    MenuRepository,
    OrderNumberSequence,
    OrderRepository,
)
from orderdesk.application.use_cases.context import NO_TRACE, TraceContext
from orderdesk.domain.common.ids import MenuItemId
from orderdesk.domain.order.delivery import estimated_delivery_minutes
from orderdesk.domain.order.entities import CustomerDetails, OrderLine, create_pending_order
from orderdesk.domain.order.events import ORDER_PLACED, OrderPlaced
from orderdesk.domain.order.numbering import DEFAULT_ORDER_NUMBER_PREFIX, format_order_number
from orderdesk.domain.order.pricing import PriceBreakdown, compute_totals

logger = logging.getLogger(__name__)

_CLIENT_TOTAL_FIELDS = (
    ("subtotal", "subtotal"),
    ("delivery_fee", "deliveryFee"),
    ("tax", "tax"),
    ("total", "total"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreateOrder:
    """Price, number, snapshot and persist a submitted cart.

    Totals sent by the client are optional. When present they must equal the
    totals derived from the catalog at submission time, otherwise the order is
    rejected so the client can refresh its quote.
    """

    def __init__(
        self,
        menu_repository: MenuRepository,
        order_repository: OrderRepository,
        number_sequence: OrderNumberSequence,
        publisher: EventPublisher,
        order_number_prefix: str = DEFAULT_ORDER_NUMBER_PREFIX,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._menu_repository = menu_repository
        self._order_repository = order_repository
        self._number_sequence = number_sequence
        self._publisher = publisher
        self._order_number_prefix = order_number_prefix
        self._clock = clock

    def execute(
        self,
        request_dto: CreateOrderRequest,
        trace_ctx: TraceContext = NO_TRACE,
    ) -> OrderResponse:
        draft = request_dto.order
        if not request_dto.items:
            record_rejection("empty_items")
            raise ValidationError(
                "order must contain at least one item",
                details={"errors": [field_error("items", "must contain at least one item")]},
            )

        errors: list[dict[str, Any]] = []
        if not draft.customer_phone.strip():
            errors.append(field_error("order.customerPhone", "customer phone is required"))

        lines = self._snapshot_lines(request_dto, errors)
        if errors:
            record_rejection("invalid_items")
            raise ValidationError("order validation failed", details={"errors": errors})

        pricing = compute_totals(lines, draft.order_type, draft.delivery_location)
        errors.extend(_client_total_mismatches(draft, pricing))
        if errors:
            record_rejection("total_mismatch")
            raise ValidationError("order totals do not match", details={"errors": errors})

        order_number = format_order_number(
            self._order_number_prefix,
            self._number_sequence.next_value(),
        )
        now = self._clock()
        new_order = create_pending_order(
            order_number=order_number,
            order_type=draft.order_type,
            customer=CustomerDetails(
                phone=draft.customer_phone.strip(),
                name=(draft.customer_name or "").strip() or None,
                delivery_location=draft.delivery_location,
                detail_address=draft.detail_address or None,
                custom_address=draft.custom_address or None,
            ),
            payment_method=draft.payment_method,
            pricing=pricing,
            estimated_delivery_time=estimated_delivery_minutes(
                draft.order_type,
                draft.delivery_location,
            ),
            lines=lines,
            now=now,
        )
        order = self._order_repository.create(new_order)
        record_order_created(order)
        logger.info(
            "order_created",
            extra={
                "order_id": int(order.order_id),
                "order_number": str(order.order_number),
                "order_type": order.order_type.value,
                "total": order.pricing.total,
            },
        )

        message = serialize_order_placed(
            OrderPlaced(order=order, occurred_at=now),
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        try:
            self._publisher.publish(channel=ORDER_EVENTS_CHANNEL, message=message)
        except Exception:
            record_publish_failure(ORDER_PLACED)
            logger.warning(
                "order_event_publish_failed",
                exc_info=True,
                extra={"order_number": str(order.order_number), "event_type": ORDER_PLACED},
            )

        return to_order_response(order)

    def _snapshot_lines(
        self,
        request_dto: CreateOrderRequest,
        errors: list[dict[str, Any]],
    ) -> list[OrderLine]:
        menu_items = self._menu_repository.get_many(
            MenuItemId(item.menu_item_id) for item in request_dto.items
        )
        lines: list[OrderLine] = []
        for index, request_item in enumerate(request_dto.items):
            location = f"items.{index}"
            if request_item.quantity < 1:
                errors.append(field_error(f"{location}.quantity", "quantity must be >= 1"))

            menu_item = menu_items.get(MenuItemId(request_item.menu_item_id))
            if menu_item is None:
                errors.append(
                    field_error(
                        f"{location}.menuItemId",
                        f"menu item {request_item.menu_item_id} does not exist",
                    )
                )
                continue
            if not menu_item.available:
                errors.append(
                    field_error(
                        f"{location}.menuItemId",
                        f"menu item {request_item.menu_item_id} is unavailable",
                    )
                )
                continue
            if request_item.price is not None and request_item.price != menu_item.price:
                errors.append(
                    field_error(
                        f"{location}.price",
                        "price changed since the cart was built",
                        expected=menu_item.price,
                        received=request_item.price,
                    )
                )
                continue
            if request_item.quantity >= 1:
                lines.append(
                    OrderLine(
                        menu_item_id=menu_item.item_id,
                        menu_item_name=menu_item.name,
                        unit_price=menu_item.price,
                        quantity=request_item.quantity,
                    )
                )
        return lines


def _client_total_mismatches(
    draft: OrderDraftRequest,
    pricing: PriceBreakdown,
) -> list[dict[str, Any]]:
    mismatches: list[dict[str, Any]] = []
    for attribute, alias in _CLIENT_TOTAL_FIELDS:
        received = getattr(draft, attribute)
        expected = getattr(pricing, attribute)
        if received is not None and received != expected:
            mismatches.append(
                field_error(
                    f"order.{alias}",
                    f"{alias} does not match the server-computed value",
                    expected=expected,
                    received=received,
                )
            )
    return mismatches
