from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderdesk.domain.common.ids import MenuItemId, OrderId, OrderItemId, OrderNumber
from orderdesk.domain.order.delivery import DeliveryLocation, OrderType
from orderdesk.domain.order.entities import (
    ALLOWED_TRANSITIONS,
    CustomerDetails,
    Order,
    OrderItem,
    OrderLine,
    OrderStatus,
    OrderTransitionError,
    PaymentMethod,
    can_transition,
    create_pending_order,
)
from orderdesk.domain.order.numbering import format_order_number
from orderdesk.domain.order.pricing import PriceBreakdown

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _order(status: OrderStatus = OrderStatus.PENDING) -> Order:
    return Order(
        order_id=OrderId(1),
        order_number=OrderNumber("MB-001"),
        order_type=OrderType.DELIVERY,
        customer=CustomerDetails(phone="0901234567"),
        payment_method=PaymentMethod.CASH,
        pricing=PriceBreakdown(subtotal=140000, delivery_fee=0, tax=11200, total=151200),
        status=status,
        estimated_delivery_time=25,
        created_at=NOW,
        updated_at=NOW,
        items=[
            OrderItem(
                item_id=OrderItemId(1),
                order_id=OrderId(1),
                menu_item_id=MenuItemId(1),
                menu_item_name="곰탕",
                price=140000,
                quantity=1,
            )
        ],
    )


def test_order_number_is_zero_padded_to_three_digits() -> None:
    assert format_order_number("MB", 1) == "MB-001"
    assert format_order_number("MB", 42) == "MB-042"
    assert format_order_number("MB", 1234) == "MB-1234"


@pytest.mark.parametrize(("prefix", "value"), [("MB", 0), ("", 1), ("M-B", 1)])
def test_order_number_rejects_bad_input(prefix: str, value: int) -> None:
    with pytest.raises(ValueError):
        format_order_number(prefix, value)


def test_happy_path_walks_to_completed() -> None:
    order = _order()
    later = NOW + timedelta(minutes=5)
    for target in (
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.DELIVERED,
        OrderStatus.COMPLETED,
    ):
        order = order.transition_to(target, later)

    assert order.status == OrderStatus.COMPLETED
    assert order.updated_at == later
    assert order.created_at == NOW


def test_ready_table_order_can_complete_without_delivery() -> None:
    assert can_transition(OrderStatus.READY, OrderStatus.COMPLETED)


def test_skipping_a_step_is_rejected() -> None:
    with pytest.raises(OrderTransitionError):
        _order(OrderStatus.PENDING).transition_to(OrderStatus.READY, NOW)


@pytest.mark.parametrize("terminal", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
def test_terminal_states_have_no_exits(terminal: OrderStatus) -> None:
    assert terminal.is_terminal
    for target in OrderStatus:
        assert not can_transition(terminal, target)


def test_every_non_terminal_state_can_be_cancelled() -> None:
    for status, targets in ALLOWED_TRANSITIONS.items():
        if not status.is_terminal:
            assert OrderStatus.CANCELLED in targets


def test_customer_phone_must_not_be_blank() -> None:
    with pytest.raises(ValueError):
        CustomerDetails(phone="   ")


def test_table_order_drops_delivery_fields() -> None:
    lines = [
        OrderLine(
            menu_item_id=MenuItemId(1),
            menu_item_name="곰탕",
            unit_price=140000,
            quantity=1,
        )
    ]
    new_order = create_pending_order(
        order_number=OrderNumber("MB-007"),
        order_type=OrderType.TABLE,
        customer=CustomerDetails(
            phone="0901234567",
            name="Kim",
            delivery_location=DeliveryLocation.OTHER,
            custom_address="12 Nguyen Hue",
        ),
        payment_method=PaymentMethod.TRANSFER,
        pricing=PriceBreakdown(subtotal=140000, delivery_fee=0, tax=11200, total=151200),
        estimated_delivery_time=15,
        lines=lines,
        now=NOW,
    )

    assert new_order.status == OrderStatus.PENDING
    assert new_order.customer.name == "Kim"
    assert new_order.customer.delivery_location is None
    assert new_order.customer.custom_address is None


def test_new_order_subtotal_must_match_lines() -> None:
    lines = [
        OrderLine(
            menu_item_id=MenuItemId(1),
            menu_item_name="곰탕",
            unit_price=140000,
            quantity=2,
        )
    ]
    with pytest.raises(ValueError):
        create_pending_order(
            order_number=OrderNumber("MB-001"),
            order_type=OrderType.DELIVERY,
            customer=CustomerDetails(phone="0901234567"),
            payment_method=PaymentMethod.CASH,
            pricing=PriceBreakdown(subtotal=140000, delivery_fee=0, tax=11200, total=151200),
            estimated_delivery_time=25,
            lines=lines,
            now=NOW,
        )


def test_order_item_line_total() -> None:
    item = _order().items[0]
    assert item.line_total == 140000
    assert item.unit_price == item.price
