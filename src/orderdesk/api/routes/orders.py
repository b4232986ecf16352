from __future__ import annotations

from fastapi import APIRouter, status

from orderdesk.api.middleware.request_id import get_request_id
from orderdesk.application.dto.requests import CreateOrderRequest, UpdateOrderStatusRequest
from orderdesk.application.dto.responses import OrderResponse
from orderdesk.application.use_cases.context import TraceContext
from orderdesk.application.use_cases.create_order import CreateOrder
from orderdesk.application.use_cases.get_order import GetOrder, GetOrderByNumber, ListOrders
from orderdesk.application.use_cases.update_order_status import UpdateOrderStatus
from orderdesk.domain.common.ids import OrderId, OrderNumber
from orderdesk.domain.order.entities import OrderStatus
from orderdesk.infrastructure.container import get_container
from orderdesk.infrastructure.observability.otel import current_trace_id

router = APIRouter(tags=["orders"])


def _trace_context() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())


def _create_order_use_case() -> CreateOrder:
    container = get_container()
    return CreateOrder(
        menu_repository=container.menu_repository,
        order_repository=container.order_repository,
        number_sequence=container.number_sequence,
        publisher=container.publisher,
        order_number_prefix=container.order_number_prefix,
    )


def _update_order_status_use_case() -> UpdateOrderStatus:
    container = get_container()
    return UpdateOrderStatus(
        order_repository=container.order_repository,
        publisher=container.publisher,
    )


@router.get("/orders", response_model=list[OrderResponse])
def list_orders(status: OrderStatus | None = None) -> list[OrderResponse]:
    return ListOrders(order_repository=get_container().order_repository).execute(status=status)


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(request_dto: CreateOrderRequest) -> OrderResponse:
    return _create_order_use_case().execute(request_dto, trace_ctx=_trace_context())


@router.get("/orders/number/{order_number}", response_model=OrderResponse)
def get_order_by_number(order_number: str) -> OrderResponse:
    use_case = GetOrderByNumber(order_repository=get_container().order_repository)
    return use_case.execute(order_number=OrderNumber(order_number))


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: int) -> OrderResponse:
    use_case = GetOrder(order_repository=get_container().order_repository)
    return use_case.execute(order_id=OrderId(order_id))


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(order_id: int, request_dto: UpdateOrderStatusRequest) -> OrderResponse:
    return _update_order_status_use_case().execute(
        order_id=OrderId(order_id),
        new_status=request_dto.status,
        trace_ctx=_trace_context(),
    )
