from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from orderdesk.domain.order.entities import Order, OrderStatus

ORDER_PLACED = "order.placed"
ORDER_STATUS_CHANGED = "order.status_changed"


@dataclass(frozen=True)
class OrderPlaced:
    order: Order
    occurred_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order: Order
    previous_status: OrderStatus
    occurred_at: datetime
