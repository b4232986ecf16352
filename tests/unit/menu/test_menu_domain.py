from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderdesk.domain.common.ids import CategoryId, MenuItemId
from orderdesk.domain.menu.entities import Category, MenuItem, MenuItemDraft, sort_categories

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


def test_menu_item_defaults() -> None:
    item = MenuItem.from_draft(MenuItemId(1), MenuItemDraft(name="곰탕", price=140000, image=""))

    assert item.category == "main"
    assert item.available
    assert item.is_visible
    assert item.is_listed


@pytest.mark.parametrize(("name", "price"), [("", 100), ("   ", 100), ("곰탕", -1)])
def test_menu_item_validation(name: str, price: int) -> None:
    with pytest.raises(ValueError):
        MenuItemDraft(name=name, price=price, image="")


def test_hidden_or_unavailable_items_are_not_listed() -> None:
    item = MenuItem(item_id=MenuItemId(1), name="곰탕", price=140000, image="")

    assert not item.with_changes({"available": False}).is_listed
    assert not item.with_changes({"is_visible": False}).is_listed


def test_menu_item_id_is_immutable() -> None:
    item = MenuItem(item_id=MenuItemId(1), name="곰탕", price=140000, image="")

    with pytest.raises(ValueError):
        item.with_changes({"item_id": 2})
    with pytest.raises(ValueError):
        item.with_changes({"colour": "red"})


def test_categories_sort_by_sort_order_then_insertion() -> None:
    categories = [
        Category(CategoryId(3), "rice", "Rice", True, 2, NOW),
        Category(CategoryId(1), "soup", "Soup", True, 1, NOW),
        Category(CategoryId(2), "noodles", "Noodles", True, 2, NOW),
    ]

    assert [category.name for category in sort_categories(categories)] == [
        "soup",
        "noodles",
        "rice",
    ]
