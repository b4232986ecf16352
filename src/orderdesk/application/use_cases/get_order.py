from __future__ import annotations

from orderdesk.application.dto.responses import OrderResponse
from orderdesk.application.errors import OrderNotFoundError
from orderdesk.application.mappers.order_mapper import to_order_response
from orderdesk.application.ports.repositories import OrderRepository
from orderdesk.domain.common.ids import OrderId, OrderNumber
from orderdesk.domain.order.entities import OrderStatus


class GetOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return to_order_response(order)


class GetOrderByNumber:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_number: OrderNumber) -> OrderResponse:
        order = self._order_repository.get_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(f"order {order_number} not found")
        return to_order_response(order)


class ListOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, status: OrderStatus | None = None) -> list[OrderResponse]:
        return [to_order_response(order) for order in self._order_repository.list_all(status)]
