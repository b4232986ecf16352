from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderdesk.application.errors import ConflictError, PersistenceError
from orderdesk.application.ports.repositories import OptimisticConcurrencyError
from orderdesk.domain.common.ids import MenuItemId, OrderNumber
from orderdesk.domain.menu.entities import CategoryDraft, MenuItemDraft
from orderdesk.domain.order.delivery import DeliveryLocation, OrderType
from orderdesk.domain.order.entities import (
    CustomerDetails,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    create_pending_order,
)
from orderdesk.domain.order.pricing import PriceBreakdown
from orderdesk.domain.popup.entities import PopupDraft
from orderdesk.infrastructure.memory.repositories import (
    InMemoryCategoryRepository,
    InMemoryMenuRepository,
    InMemoryOrderRepository,
    InMemoryPopupRepository,
    MemoryOrderNumberSequence,
)
from orderdesk.infrastructure.memory.store import InMemoryStore

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _new_order(number: str):
    return create_pending_order(
        order_number=OrderNumber(number),
        order_type=OrderType.DELIVERY,
        customer=CustomerDetails(
            phone="0901234567",
            delivery_location=DeliveryLocation.KALIDAS,
            detail_address="Room 5",
        ),
        payment_method=PaymentMethod.CASH,
        pricing=PriceBreakdown(subtotal=280000, delivery_fee=0, tax=22400, total=302400),
        estimated_delivery_time=25,
        lines=[OrderLine(MenuItemId(1), "곰탕", 140000, 2)],
        now=NOW,
    )


def test_ids_come_from_counters_not_collection_size() -> None:
    store = InMemoryStore()
    categories = InMemoryCategoryRepository(store)
    first = categories.create(CategoryDraft(name="soup", display_name="Soup"), now=NOW)
    categories.delete(first.category_id)

    second = categories.create(CategoryDraft(name="rice", display_name="Rice"), now=NOW)

    assert int(second.category_id) == 2


def test_duplicate_order_number_is_a_conflict() -> None:
    orders = InMemoryOrderRepository(InMemoryStore())
    orders.create(_new_order("MB-001"))

    with pytest.raises(ConflictError):
        orders.create(_new_order("MB-001"))


def test_versioned_status_update() -> None:
    orders = InMemoryOrderRepository(InMemoryStore())
    order = orders.create(_new_order("MB-001"))
    later = NOW + timedelta(minutes=5)

    updated = orders.update_status(order.order_id, OrderStatus.CONFIRMED, later, expected_version=1)

    assert updated.version == 2
    assert updated.updated_at == later
    assert orders.get(order.order_id) == updated
    with pytest.raises(OptimisticConcurrencyError):
        orders.update_status(order.order_id, OrderStatus.CANCELLED, later, expected_version=1)


def test_concurrent_number_allocation_is_unique() -> None:
    sequence = MemoryOrderNumberSequence(InMemoryStore())

    with ThreadPoolExecutor(max_workers=8) as pool:
        values = list(pool.map(lambda _: sequence.next_value(), range(200)))

    assert sorted(values) == list(range(1, 201))


def test_snapshot_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "state" / "orderdesk.json"
    store = InMemoryStore(snapshot_path=path)
    InMemoryMenuRepository(store).create(MenuItemDraft(name="곰탕", price=140000, image=""))
    InMemoryCategoryRepository(store).create(
        CategoryDraft(name="soup", display_name="국물요리"), now=NOW
    )
    InMemoryPopupRepository(store).create(PopupDraft(title="notice", end_date=NOW), now=NOW)
    MemoryOrderNumberSequence(store).next_value()
    order = InMemoryOrderRepository(store).create(_new_order("MB-001"))

    assert path.exists()
    reloaded = InMemoryStore(snapshot_path=path)

    orders = InMemoryOrderRepository(reloaded)
    assert orders.get_by_number(OrderNumber("MB-001")) == order
    assert InMemoryMenuRepository(reloaded).list_items()[0].name == "곰탕"
    assert InMemoryCategoryRepository(reloaded).list_all()[0].display_name == "국물요리"
    assert InMemoryPopupRepository(reloaded).list_all()[0].end_date == NOW
    assert MemoryOrderNumberSequence(reloaded).next_value() == 2
    assert int(orders.create(_new_order("MB-002")).order_id) == 2


def test_corrupt_snapshot_fails_loudly(tmp_path: Path) -> None:
    path = tmp_path / "orderdesk.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        InMemoryStore(snapshot_path=path)


def _fail_flush_when(store: InMemoryStore, monkeypatch: pytest.MonkeyPatch, condition) -> None:
    real_flush = store.flush

    def flush() -> None:
        if condition():
            raise PersistenceError("could not write the storage snapshot")
        real_flush()

    monkeypatch.setattr(store, "flush", flush)


def test_failed_snapshot_write_leaves_no_order_behind(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryStore()
    orders = InMemoryOrderRepository(store)
    _fail_flush_when(store, monkeypatch, lambda: bool(store.orders))

    with pytest.raises(PersistenceError):
        orders.create(_new_order("MB-001"))

    assert orders.list_all() == []
    assert orders.get_by_number(OrderNumber("MB-001")) is None

    monkeypatch.undo()
    assert int(orders.create(_new_order("MB-001")).order_id) == 1


def test_failed_snapshot_write_keeps_previous_status(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryStore()
    orders = InMemoryOrderRepository(store)
    order = orders.create(_new_order("MB-001"))
    _fail_flush_when(store, monkeypatch, lambda: True)

    with pytest.raises(PersistenceError):
        orders.update_status(order.order_id, OrderStatus.CONFIRMED, NOW, expected_version=1)

    current = orders.get(order.order_id)
    assert current is not None
    assert current.status == OrderStatus.PENDING
    assert current.version == 1


def test_failed_snapshot_write_rolls_back_catalog_changes(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = InMemoryStore()
    menu = InMemoryMenuRepository(store)
    item = menu.create(MenuItemDraft(name="곰탕", price=140000, image=""))
    _fail_flush_when(store, monkeypatch, lambda: True)

    with pytest.raises(PersistenceError):
        menu.update(item.item_id, {"price": 150000})
    with pytest.raises(PersistenceError):
        menu.create(MenuItemDraft(name="보쌈", price=400000, image=""))

    assert menu.list_items() == [item]
