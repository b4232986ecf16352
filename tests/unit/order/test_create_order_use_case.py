from __future__ import annotations

import json
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderdesk.application.dto.requests import CreateOrderRequest
from orderdesk.application.errors import PersistenceError, ValidationError
from orderdesk.application.ports.publisher import ORDER_EVENTS_CHANNEL
from orderdesk.application.use_cases.context import TraceContext
from orderdesk.application.use_cases.create_order import CreateOrder
from orderdesk.application.use_cases.get_order import ListOrders
from orderdesk.domain.common.ids import MenuItemId, OrderId, OrderItemId
from orderdesk.domain.menu.entities import MenuItem
from orderdesk.domain.order.entities import NewOrder, Order, OrderItem
from orderdesk.infrastructure.memory.repositories import (
    InMemoryMenuRepository,
    InMemoryOrderRepository,
    MemoryOrderNumberSequence,
)
from orderdesk.infrastructure.memory.store import InMemoryStore

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class FakeMenuRepository:
    def __init__(self, items: list[MenuItem]) -> None:
        self.items = {item.item_id: item for item in items}
        self.get_many_calls = 0

    def get_many(self, item_ids: Iterable[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        self.get_many_calls += 1
        return {item_id: self.items[item_id] for item_id in item_ids if item_id in self.items}


class FakeOrderRepository:
    def __init__(self) -> None:
        self.orders: list[Order] = []

    def create(self, new_order: NewOrder) -> Order:
        order_id = OrderId(len(self.orders) + 1)
        order = Order(
            order_id=order_id,
            order_number=new_order.order_number,
            order_type=new_order.order_type,
            customer=new_order.customer,
            payment_method=new_order.payment_method,
            pricing=new_order.pricing,
            status=new_order.status,
            estimated_delivery_time=new_order.estimated_delivery_time,
            created_at=new_order.created_at,
            updated_at=new_order.created_at,
            items=[
                OrderItem(
                    item_id=OrderItemId(index + 1),
                    order_id=order_id,
                    menu_item_id=line.menu_item_id,
                    menu_item_name=line.menu_item_name,
                    price=line.unit_price,
                    quantity=line.quantity,
                )
                for index, line in enumerate(new_order.lines)
            ],
        )
        self.orders.append(order)
        return order


class FakeSequence:
    def __init__(self) -> None:
        self.value = 0

    def next_value(self) -> int:
        self.value += 1
        return self.value


class FakePublisher:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def publish(self, channel: str, message: str) -> None:
        self.messages.append((channel, message))


class FailingPublisher:
    def publish(self, channel: str, message: str) -> None:
        raise ConnectionError("redis down")


def _menu() -> list[MenuItem]:
    return [
        MenuItem(item_id=MenuItemId(1), name="곰탕", price=140000, image="/gomtang.jpg"),
        MenuItem(item_id=MenuItemId(2), name="군만두", price=70000, image="/gunmandu.jpg"),
        MenuItem(
            item_id=MenuItemId(3),
            name="차돌박이",
            price=1700000,
            image="/chadol.jpg",
            available=False,
        ),
    ]


def _use_case(
    menu_repository: FakeMenuRepository | None = None,
    order_repository: FakeOrderRepository | None = None,
    publisher=None,
    sequence: FakeSequence | None = None,
) -> CreateOrder:
    return CreateOrder(
        menu_repository=menu_repository or FakeMenuRepository(_menu()),
        order_repository=order_repository or FakeOrderRepository(),
        number_sequence=sequence or FakeSequence(),
        publisher=publisher or FakePublisher(),
        clock=lambda: NOW,
    )


def _request(items: list[dict], **order_fields) -> CreateOrderRequest:
    order = {
        "orderType": "delivery",
        "customerPhone": "0901234567",
        "deliveryLocation": "kalidas",
        "paymentMethod": "cash",
    }
    order.update(order_fields)
    return CreateOrderRequest.model_validate({"order": order, "items": items})


def test_create_order_snapshots_prices_and_derives_totals() -> None:
    orders = FakeOrderRepository()
    publisher = FakePublisher()
    menu = FakeMenuRepository(_menu())
    use_case = _use_case(menu_repository=menu, order_repository=orders, publisher=publisher)

    response = use_case.execute(
        _request([{"menuItemId": 1, "quantity": 1}]),
        trace_ctx=TraceContext(trace_id="t" * 32, request_id="req-1"),
    )

    assert response.orderNumber == "MB-001"
    assert response.status == "pending"
    assert response.subtotal == 140000
    assert response.deliveryFee == 0
    assert response.tax == 11200
    assert response.total == 151200
    assert response.estimatedDeliveryTime == 25
    assert response.items[0].menuItemName == "곰탕"
    assert response.items[0].price == 140000
    assert menu.get_many_calls == 1
    assert len(orders.orders) == 1

    assert len(publisher.messages) == 1
    channel, raw = publisher.messages[0]
    envelope = json.loads(raw)
    assert channel == ORDER_EVENTS_CHANNEL
    assert envelope["event_type"] == "order.placed"
    assert envelope["request_id"] == "req-1"
    assert envelope["trace_id"] == "t" * 32
    assert envelope["payload"]["order"]["orderNumber"] == "MB-001"


def test_order_numbers_follow_the_sequence() -> None:
    sequence = FakeSequence()
    use_case = _use_case(sequence=sequence)

    first = use_case.execute(_request([{"menuItemId": 1, "quantity": 1}]))
    second = use_case.execute(_request([{"menuItemId": 2, "quantity": 2}]))

    assert [first.orderNumber, second.orderNumber] == ["MB-001", "MB-002"]


def test_other_location_delivery_pays_fee_and_waits_longer() -> None:
    response = _use_case().execute(
        _request([{"menuItemId": 2, "quantity": 2}], deliveryLocation="other")
    )

    assert response.subtotal == 140000
    assert response.deliveryFee == 30000
    assert response.tax == 13600
    assert response.total == 183600
    assert response.estimatedDeliveryTime == 45


def test_table_order_clears_delivery_fields() -> None:
    response = _use_case().execute(
        _request(
            [{"menuItemId": 1, "quantity": 1}],
            orderType="table",
            deliveryLocation="other",
            customAddress="somewhere",
        )
    )

    assert response.deliveryFee == 0
    assert response.deliveryLocation is None
    assert response.customAddress is None
    assert response.estimatedDeliveryTime == 15


def test_empty_items_are_rejected_and_nothing_is_persisted() -> None:
    orders = FakeOrderRepository()
    sequence = FakeSequence()

    with pytest.raises(ValidationError) as exc_info:
        _use_case(order_repository=orders, sequence=sequence).execute(_request([]))

    assert orders.orders == []
    assert sequence.value == 0
    assert exc_info.value.details["errors"][0]["loc"] == "items"


def test_unknown_unavailable_and_bad_quantity_are_reported_together() -> None:
    orders = FakeOrderRepository()

    with pytest.raises(ValidationError) as exc_info:
        _use_case(order_repository=orders).execute(
            _request(
                [
                    {"menuItemId": 1, "quantity": 0},
                    {"menuItemId": 99, "quantity": 1},
                    {"menuItemId": 3, "quantity": 1},
                ]
            )
        )

    locations = [error["loc"] for error in exc_info.value.details["errors"]]
    assert locations == ["items.0.quantity", "items.1.menuItemId", "items.2.menuItemId"]
    assert orders.orders == []


def test_blank_phone_is_rejected() -> None:
    with pytest.raises(ValidationError) as exc_info:
        _use_case().execute(_request([{"menuItemId": 1, "quantity": 1}], customerPhone="  "))

    assert exc_info.value.details["errors"][0]["loc"] == "order.customerPhone"


def test_stale_client_price_is_rejected() -> None:
    with pytest.raises(ValidationError) as exc_info:
        _use_case().execute(_request([{"menuItemId": 1, "quantity": 1, "price": 120000}]))

    error = exc_info.value.details["errors"][0]
    assert error["loc"] == "items.0.price"
    assert error["expected"] == 140000
    assert error["received"] == 120000


def test_client_totals_must_match_server_totals() -> None:
    with pytest.raises(ValidationError) as exc_info:
        _use_case().execute(
            _request(
                [{"menuItemId": 1, "quantity": 1}],
                subtotal=140000,
                deliveryFee=0,
                tax=11000,
                total=151000,
            )
        )

    locations = {error["loc"] for error in exc_info.value.details["errors"]}
    assert locations == {"order.tax", "order.total"}


def test_matching_client_totals_are_accepted() -> None:
    response = _use_case().execute(
        _request(
            [{"menuItemId": 1, "quantity": 1, "price": 140000}],
            subtotal=140000,
            deliveryFee=0,
            tax=11200,
            total=151200,
        )
    )

    assert response.total == 151200


def test_publish_failure_does_not_fail_the_order() -> None:
    orders = FakeOrderRepository()

    response = _use_case(order_repository=orders, publisher=FailingPublisher()).execute(
        _request([{"menuItemId": 1, "quantity": 1}])
    )

    assert response.orderNumber == "MB-001"
    assert len(orders.orders) == 1


def test_snapshot_survives_later_price_change() -> None:
    menu = FakeMenuRepository(_menu())
    orders = FakeOrderRepository()
    use_case = _use_case(menu_repository=menu, order_repository=orders)

    use_case.execute(_request([{"menuItemId": 1, "quantity": 1}]))
    menu.items[MenuItemId(1)] = menu.items[MenuItemId(1)].with_changes({"price": 999000})

    assert orders.orders[0].items[0].price == 140000
    assert orders.orders[0].pricing.subtotal == 140000


def _memory_use_case(store: InMemoryStore, publisher: FakePublisher | None = None) -> CreateOrder:
    return CreateOrder(
        menu_repository=InMemoryMenuRepository(store),
        order_repository=InMemoryOrderRepository(store),
        number_sequence=MemoryOrderNumberSequence(store),
        publisher=publisher or FakePublisher(),
    )


def _stocked_store() -> InMemoryStore:
    store = InMemoryStore()
    store.menu_items = {int(item.item_id): item for item in _menu()}
    return store


def test_parallel_creations_get_distinct_order_numbers() -> None:
    store = _stocked_store()
    use_case = _memory_use_case(store)

    def _create(_: int) -> str:
        return use_case.execute(_request([{"menuItemId": 1, "quantity": 1}])).orderNumber

    with ThreadPoolExecutor(max_workers=16) as pool:
        numbers = list(pool.map(_create, range(200)))

    assert len(set(numbers)) == 200
    assert len(InMemoryOrderRepository(store).list_all()) == 200


def test_failed_persist_leaves_no_visible_order(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _stocked_store()
    real_flush = store.flush

    def flush() -> None:
        if store.orders:
            raise PersistenceError("could not write the storage snapshot")
        real_flush()

    monkeypatch.setattr(store, "flush", flush)
    publisher = FakePublisher()
    use_case = _memory_use_case(store, publisher)

    with pytest.raises(PersistenceError):
        use_case.execute(_request([{"menuItemId": 1, "quantity": 1}]))

    assert ListOrders(order_repository=InMemoryOrderRepository(store)).execute() == []
    assert publisher.messages == []


def test_creation_time_is_read_after_the_number_is_allocated() -> None:
    calls: list[str] = []

    class RecordingSequence(FakeSequence):
        def next_value(self) -> int:
            calls.append("number")
            return super().next_value()

    def clock() -> datetime:
        calls.append("clock")
        return NOW

    use_case = CreateOrder(
        menu_repository=FakeMenuRepository(_menu()),
        order_repository=FakeOrderRepository(),
        number_sequence=RecordingSequence(),
        publisher=FakePublisher(),
        clock=clock,
    )

    use_case.execute(_request([{"menuItemId": 1, "quantity": 1}]))

    assert calls == ["number", "clock"]
