from __future__ import annotations

from prometheus_client import Counter, Histogram

from orderdesk.domain.order.entities import Order, OrderStatus

ORDERS_CREATED_TOTAL = Counter(
    "orderdesk_orders_created_total",
    "Total number of orders created.",
    ["order_type", "payment_method"],
)

ORDER_VALUE = Histogram(
    "orderdesk_order_total_amount",
    "Order totals in the smallest currency unit.",
    buckets=(50_000, 100_000, 200_000, 500_000, 1_000_000, 2_000_000, 5_000_000),
)

ORDER_TRANSITION_TOTAL = Counter(
    "orderdesk_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_REJECTED_TOTAL = Counter(
    "orderdesk_order_rejected_total",
    "Total number of rejected order submissions or transitions.",
    ["reason"],
)

ORDER_EVENTS_PUBLISH_FAILED_TOTAL = Counter(
    "orderdesk_order_events_publish_failed_total",
    "Total number of order events that could not be handed to the event channel.",
    ["event_type"],
)

NOTIFICATIONS_TOTAL = Counter(
    "orderdesk_notifications_total",
    "Order notifications by outcome.",
    ["event_type", "outcome"],
)


def record_order_created(order: Order) -> None:
    ORDERS_CREATED_TOTAL.labels(
        order_type=order.order_type.value,
        payment_method=order.payment_method.value,
    ).inc()
    ORDER_VALUE.observe(order.pricing.total)


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_rejection(reason: str) -> None:
    ORDER_REJECTED_TOTAL.labels(reason=reason).inc()


def record_publish_failure(event_type: str) -> None:
    ORDER_EVENTS_PUBLISH_FAILED_TOTAL.labels(event_type=event_type).inc()


def record_notification(event_type: str, outcome: str) -> None:
    NOTIFICATIONS_TOTAL.labels(event_type=event_type, outcome=outcome).inc()
