from __future__ import annotations

from orderdesk.application.dto.responses import CategoryResponse, MenuItemResponse
from orderdesk.domain.menu.entities import Category, MenuItem


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        id=int(item.item_id),
        name=item.name,
        price=item.price,
        image=item.image,
        category=item.category,
        available=item.available,
        isVisible=item.is_visible,
    )


def to_category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=int(category.category_id),
        name=category.name,
        displayName=category.display_name,
        isVisible=category.is_visible,
        sortOrder=category.sort_order,
        createdAt=category.created_at,
    )
