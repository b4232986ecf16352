from __future__ import annotations

import logging

from orderdesk.application.dto.requests import CreateMenuItemRequest, UpdateMenuItemRequest
from orderdesk.application.dto.responses import MenuItemResponse
from orderdesk.application.errors import MenuItemNotFoundError, ValidationError
from orderdesk.application.mappers.menu_mapper import to_menu_item_response
from orderdesk.application.ports.repositories import MenuRepository
from orderdesk.domain.common.ids import MenuItemId
from orderdesk.domain.menu.entities import MenuItemDraft

logger = logging.getLogger(__name__)


class ListMenuItems:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, include_hidden: bool = False) -> list[MenuItemResponse]:
        if include_hidden:
            items = self._menu_repository.list_items()
        else:
            items = self._menu_repository.list_available()
        return [to_menu_item_response(item) for item in items]


class GetMenuItem:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, item_id: MenuItemId) -> MenuItemResponse:
        item = self._menu_repository.get(item_id)
        if item is None:
            raise MenuItemNotFoundError(f"menu item {item_id} not found")
        return to_menu_item_response(item)


class CreateMenuItem:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, request_dto: CreateMenuItemRequest) -> MenuItemResponse:
        try:
            draft = MenuItemDraft(**request_dto.model_dump())
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        item = self._menu_repository.create(draft)
        logger.info("menu_item_created", extra={"menu_item_id": int(item.item_id)})
        return to_menu_item_response(item)


class UpdateMenuItem:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(
        self,
        item_id: MenuItemId,
        request_dto: UpdateMenuItemRequest,
    ) -> MenuItemResponse:
        changes = request_dto.model_dump(exclude_unset=True, exclude_none=True)
        try:
            item = self._menu_repository.update(item_id, changes)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if item is None:
            raise MenuItemNotFoundError(f"menu item {item_id} not found")

        logger.info(
            "menu_item_updated",
            extra={"menu_item_id": int(item.item_id), "fields": sorted(changes)},
        )
        return to_menu_item_response(item)
