from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any

from orderdesk.domain.common.ids import CategoryId, MenuItemId

DEFAULT_CATEGORY = "main"


@dataclass(frozen=True)
class MenuItemDraft:
    name: str
    price: int
    image: str
    category: str = DEFAULT_CATEGORY
    available: bool = True
    is_visible: bool = True

    def __post_init__(self) -> None:
        _check_menu_item_fields(self.name, self.price)


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    price: int
    image: str
    category: str = DEFAULT_CATEGORY
    available: bool = True
    is_visible: bool = True

    def __post_init__(self) -> None:
        _check_menu_item_fields(self.name, self.price)

    @property
    def is_listed(self) -> bool:
        return self.available and self.is_visible

    def with_changes(self, changes: dict[str, Any]) -> MenuItem:
        return replace(self, **_known_changes(self, changes, immutable={"item_id"}))

    @classmethod
    def from_draft(cls, item_id: MenuItemId, draft: MenuItemDraft) -> MenuItem:
        return cls(
            item_id=item_id,
            name=draft.name,
            price=draft.price,
            image=draft.image,
            category=draft.category,
            available=draft.available,
            is_visible=draft.is_visible,
        )


@dataclass(frozen=True)
class CategoryDraft:
    name: str
    display_name: str
    is_visible: bool = True
    sort_order: int = 0

    def __post_init__(self) -> None:
        _check_category_fields(self.name, self.display_name)


@dataclass(frozen=True)
class Category:
    category_id: CategoryId
    name: str
    display_name: str
    is_visible: bool
    sort_order: int
    created_at: datetime

    def __post_init__(self) -> None:
        _check_category_fields(self.name, self.display_name)

    def with_changes(self, changes: dict[str, Any]) -> Category:
        return replace(
            self,
            **_known_changes(self, changes, immutable={"category_id", "created_at"}),
        )

    @classmethod
    def from_draft(cls, category_id: CategoryId, draft: CategoryDraft, now: datetime) -> Category:
        return cls(
            category_id=category_id,
            name=draft.name,
            display_name=draft.display_name,
            is_visible=draft.is_visible,
            sort_order=draft.sort_order,
            created_at=now,
        )


def sort_categories(categories: list[Category]) -> list[Category]:
    """Display order: sort_order first, insertion order (id) on ties."""
    return sorted(categories, key=lambda category: (category.sort_order, category.category_id))


def _check_menu_item_fields(name: str, price: int) -> None:
    if not name.strip():
        raise ValueError("name must be non-empty")
    if price < 0:
        raise ValueError("price must be >= 0")


def _check_category_fields(name: str, display_name: str) -> None:
    if not name.strip():
        raise ValueError("name must be non-empty")
    if not display_name.strip():
        raise ValueError("display_name must be non-empty")


def _known_changes(entity: object, changes: dict[str, Any], immutable: set[str]) -> dict[str, Any]:
    allowed = {field.name for field in fields(entity)} - immutable  # type: ignore[arg-type]
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"unknown or immutable fields: {', '.join(sorted(unknown))}")
    return dict(changes)
