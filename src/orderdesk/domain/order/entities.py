from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from orderdesk.domain.common.ids import MenuItemId, OrderId, OrderItemId, OrderNumber
from orderdesk.domain.order.delivery import DeliveryLocation, OrderType
from orderdesk.domain.order.pricing import PriceBreakdown


class PaymentMethod(str, Enum):
    CASH = "cash"
    TRANSFER = "transfer"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset(
        {OrderStatus.DELIVERED, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class OrderLine:
    """A cart line with the catalog name and price frozen at order time."""

    menu_item_id: MenuItemId
    menu_item_name: str
    unit_price: int
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price < 0:
            raise ValueError("unit_price must be >= 0")

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderItem:
    item_id: OrderItemId
    order_id: OrderId
    menu_item_id: MenuItemId
    menu_item_name: str
    price: int
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.price < 0:
            raise ValueError("price must be >= 0")

    @property
    def unit_price(self) -> int:
        return self.price

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


@dataclass(frozen=True)
class CustomerDetails:
    phone: str
    name: str | None = None
    delivery_location: DeliveryLocation | None = None
    detail_address: str | None = None
    custom_address: str | None = None

    def __post_init__(self) -> None:
        if not self.phone.strip():
            raise ValueError("customer phone must be non-empty")

    def for_order_type(self, order_type: OrderType) -> CustomerDetails:
        if order_type == OrderType.DELIVERY:
            return self
        return CustomerDetails(phone=self.phone, name=self.name)


@dataclass(frozen=True)
class NewOrder:
    order_number: OrderNumber
    order_type: OrderType
    customer: CustomerDetails
    payment_method: PaymentMethod
    pricing: PriceBreakdown
    estimated_delivery_time: int
    lines: list[OrderLine]
    created_at: datetime
    status: OrderStatus = OrderStatus.PENDING

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("order must contain at least one line")
        if self.estimated_delivery_time < 0:
            raise ValueError("estimated_delivery_time must be >= 0")
        expected_subtotal = sum(line.line_total for line in self.lines)
        if self.pricing.subtotal != expected_subtotal:
            raise ValueError("subtotal must equal the sum of line totals")


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    order_number: OrderNumber
    order_type: OrderType
    customer: CustomerDetails
    payment_method: PaymentMethod
    pricing: PriceBreakdown
    status: OrderStatus
    estimated_delivery_time: int
    created_at: datetime
    updated_at: datetime
    items: list[OrderItem] = field(default_factory=list)
    version: int = 1

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("order must contain at least one item")
        if any(item.order_id != self.order_id for item in self.items):
            raise ValueError("order items must belong to the order")
        if self.version < 1:
            raise ValueError("version must be >= 1")

    def transition_to(self, target: OrderStatus, now: datetime) -> Order:
        if not can_transition(self.status, target):
            raise OrderTransitionError(
                f"cannot move order {self.order_number} from status={self.status.value} "
                f"to status={target.value}"
            )
        return replace(self, status=target, updated_at=now)


def create_pending_order(
    order_number: OrderNumber,
    order_type: OrderType,
    customer: CustomerDetails,
    payment_method: PaymentMethod,
    pricing: PriceBreakdown,
    estimated_delivery_time: int,
    lines: list[OrderLine],
    now: datetime,
) -> NewOrder:
    if not lines:
        raise ValueError("order must contain at least one line")

    return NewOrder(
        order_number=order_number,
        order_type=order_type,
        customer=customer.for_order_type(order_type),
        payment_method=payment_method,
        pricing=pricing,
        estimated_delivery_time=estimated_delivery_time,
        lines=list(lines),
        created_at=now,
    )


class OrderTransitionError(Exception):
    pass
