from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable

from orderdesk.application.errors import ConflictError
from orderdesk.application.ports.repositories import (
    CategoryRepository,
    DuplicateCategoryNameError,
    MenuRepository,
    OptimisticConcurrencyError,
    OrderNumberSequence,
    OrderRepository,
    PopupRepository,
)
from orderdesk.domain.common.ids import (
    CategoryId,
    MenuItemId,
    OrderId,
    OrderItemId,
    OrderNumber,
    PopupId,
)
from orderdesk.domain.menu.entities import (
    Category,
    CategoryDraft,
    MenuItem,
    MenuItemDraft,
    sort_categories,
)
from orderdesk.domain.order.entities import NewOrder, Order, OrderItem, OrderStatus
from orderdesk.domain.popup.entities import Popup, PopupDraft, first_live_popup
from orderdesk.infrastructure.memory.store import InMemoryStore


class InMemoryMenuRepository(MenuRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_items(self) -> list[MenuItem]:
        with self._store.lock:
            return [self._store.menu_items[key] for key in sorted(self._store.menu_items)]

    def list_available(self) -> list[MenuItem]:
        return [item for item in self.list_items() if item.is_listed]

    def get(self, item_id: MenuItemId) -> MenuItem | None:
        with self._store.lock:
            return self._store.menu_items.get(int(item_id))

    def get_many(self, item_ids: Iterable[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        with self._store.lock:
            found = {}
            for item_id in item_ids:
                item = self._store.menu_items.get(int(item_id))
                if item is not None:
                    found[item.item_id] = item
            return found

    def create(self, draft: MenuItemDraft) -> MenuItem:
        with self._store.write():
            item = MenuItem.from_draft(MenuItemId(self._store.next_id("menu_item")), draft)
            self._store.menu_items[int(item.item_id)] = item
        return item

    def update(self, item_id: MenuItemId, changes: dict[str, Any]) -> MenuItem | None:
        with self._store.write():
            current = self._store.menu_items.get(int(item_id))
            if current is None:
                return None
            updated = current.with_changes(changes)
            self._store.menu_items[int(item_id)] = updated
        return updated


class InMemoryCategoryRepository(CategoryRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_all(self) -> list[Category]:
        with self._store.lock:
            return sort_categories(list(self._store.categories.values()))

    def get(self, category_id: CategoryId) -> Category | None:
        with self._store.lock:
            return self._store.categories.get(int(category_id))

    def create(self, draft: CategoryDraft, now: datetime) -> Category:
        with self._store.write():
            self._ensure_name_free(draft.name, exclude=None)
            category_id = CategoryId(self._store.next_id("category"))
            category = Category.from_draft(category_id, draft, now)
            self._store.categories[int(category_id)] = category
        return category

    def update(self, category_id: CategoryId, changes: dict[str, Any]) -> Category | None:
        with self._store.write():
            current = self._store.categories.get(int(category_id))
            if current is None:
                return None
            updated = current.with_changes(changes)
            self._ensure_name_free(updated.name, exclude=int(category_id))
            self._store.categories[int(category_id)] = updated
        return updated

    def delete(self, category_id: CategoryId) -> bool:
        with self._store.write():
            return self._store.categories.pop(int(category_id), None) is not None

    def _ensure_name_free(self, name: str, exclude: int | None) -> None:
        for key, category in self._store.categories.items():
            if key != exclude and category.name == name:
                raise DuplicateCategoryNameError(f"category name already exists: {name}")


class InMemoryPopupRepository(PopupRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_all(self) -> list[Popup]:
        with self._store.lock:
            return [self._store.popups[key] for key in sorted(self._store.popups)]

    def get(self, popup_id: PopupId) -> Popup | None:
        with self._store.lock:
            return self._store.popups.get(int(popup_id))

    def get_active(self, now: datetime) -> Popup | None:
        return first_live_popup(self.list_all(), now)

    def create(self, draft: PopupDraft, now: datetime) -> Popup:
        with self._store.write():
            popup = Popup.from_draft(PopupId(self._store.next_id("popup")), draft, now)
            self._store.popups[int(popup.popup_id)] = popup
        return popup

    def update(self, popup_id: PopupId, changes: dict[str, Any], now: datetime) -> Popup | None:
        with self._store.write():
            current = self._store.popups.get(int(popup_id))
            if current is None:
                return None
            updated = current.with_changes(changes, now)
            self._store.popups[int(popup_id)] = updated
        return updated

    def delete(self, popup_id: PopupId) -> bool:
        with self._store.write():
            return self._store.popups.pop(int(popup_id), None) is not None


class InMemoryOrderRepository(OrderRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create(self, new_order: NewOrder) -> Order:
        with self._store.write():
            number = str(new_order.order_number)
            if number in self._store.order_ids_by_number:
                raise ConflictError(
                    f"order number already used: {number}",
                    details={"orderNumber": number},
                )
            order_id = OrderId(self._store.next_id("order"))
            items = [
                OrderItem(
                    item_id=OrderItemId(self._store.next_id("order_item")),
                    order_id=order_id,
                    menu_item_id=line.menu_item_id,
                    menu_item_name=line.menu_item_name,
                    price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in new_order.lines
            ]
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
                items=items,
            )
            self._store.orders[int(order_id)] = order
            self._store.order_ids_by_number[number] = int(order_id)
        return order

    def get(self, order_id: OrderId) -> Order | None:
        with self._store.lock:
            return self._store.orders.get(int(order_id))

    def get_by_number(self, order_number: OrderNumber) -> Order | None:
        with self._store.lock:
            order_id = self._store.order_ids_by_number.get(str(order_number))
            return self._store.orders.get(order_id) if order_id is not None else None

    def list_all(self, status: OrderStatus | None = None) -> list[Order]:
        with self._store.lock:
            orders = list(self._store.orders.values())
        if status is not None:
            orders = [order for order in orders if order.status == status]
        return sorted(
            orders,
            key=lambda order: (order.created_at, int(order.order_id)),
            reverse=True,
        )

    def update_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        updated_at: datetime,
        expected_version: int,
    ) -> Order:
        with self._store.write():
            current = self._store.orders.get(int(order_id))
            if current is None or current.version != expected_version:
                raise OptimisticConcurrencyError(f"order {order_id} version conflict")
            updated = replace(
                current,
                status=new_status,
                updated_at=updated_at,
                version=current.version + 1,
            )
            self._store.orders[int(order_id)] = updated
        return updated


class MemoryOrderNumberSequence(OrderNumberSequence):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def next_value(self) -> int:
        with self._store.write():
            return self._store.next_id("order_number")
