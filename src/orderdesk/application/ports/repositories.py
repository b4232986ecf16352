from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Protocol

from orderdesk.domain.common.ids import (
    CategoryId,
    MenuItemId,
    OrderId,
    OrderNumber,
    PopupId,
)
from orderdesk.domain.menu.entities import Category, CategoryDraft, MenuItem, MenuItemDraft
from orderdesk.domain.order.entities import NewOrder, Order, OrderStatus
from orderdesk.domain.popup.entities import Popup, PopupDraft


class MenuRepository(Protocol):
    def list_items(self) -> list[MenuItem]: ...

    def list_available(self) -> list[MenuItem]: ...

    def get(self, item_id: MenuItemId) -> MenuItem | None: ...

    def get_many(self, item_ids: Iterable[MenuItemId]) -> dict[MenuItemId, MenuItem]: ...

    def create(self, draft: MenuItemDraft) -> MenuItem: ...

    def update(self, item_id: MenuItemId, changes: dict[str, Any]) -> MenuItem | None: ...


class CategoryRepository(Protocol):
    def list_all(self) -> list[Category]: ...

    def get(self, category_id: CategoryId) -> Category | None: ...

    def create(self, draft: CategoryDraft, now: datetime) -> Category: ...

    def update(self, category_id: CategoryId, changes: dict[str, Any]) -> Category | None: ...

    def delete(self, category_id: CategoryId) -> bool: ...


class PopupRepository(Protocol):
    def list_all(self) -> list[Popup]: ...

    def get(self, popup_id: PopupId) -> Popup | None: ...

    def get_active(self, now: datetime) -> Popup | None: ...

    def create(self, draft: PopupDraft, now: datetime) -> Popup: ...

    def update(
        self,
        popup_id: PopupId,
        changes: dict[str, Any],
        now: datetime,
    ) -> Popup | None: ...

    def delete(self, popup_id: PopupId) -> bool: ...


class OrderRepository(Protocol):
    def create(self, new_order: NewOrder) -> Order: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def get_by_number(self, order_number: OrderNumber) -> Order | None: ...

    def list_all(self, status: OrderStatus | None = None) -> list[Order]: ...

    def update_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        updated_at: datetime,
        expected_version: int,
    ) -> Order: ...


class OrderNumberSequence(Protocol):
    def next_value(self) -> int: ...


class DuplicateCategoryNameError(Exception):
    pass


class OptimisticConcurrencyError(Exception):
    pass
