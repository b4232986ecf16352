from __future__ import annotations

from fastapi import APIRouter, Query, status

from orderdesk.application.dto.requests import CreateMenuItemRequest, UpdateMenuItemRequest
from orderdesk.application.dto.responses import MenuItemResponse
from orderdesk.application.use_cases.menu_items import (
    CreateMenuItem,
    GetMenuItem,
    ListMenuItems,
    UpdateMenuItem,
)
from orderdesk.domain.common.ids import MenuItemId
from orderdesk.infrastructure.container import get_container

router = APIRouter(tags=["menu"])


@router.get("/menu", response_model=list[MenuItemResponse])
def list_menu(
    include_hidden: bool = Query(default=False, alias="includeHidden"),
) -> list[MenuItemResponse]:
    use_case = ListMenuItems(menu_repository=get_container().menu_repository)
    return use_case.execute(include_hidden=include_hidden)


@router.get("/menu/{item_id}", response_model=MenuItemResponse)
def get_menu_item(item_id: int) -> MenuItemResponse:
    return GetMenuItem(menu_repository=get_container().menu_repository).execute(MenuItemId(item_id))


@router.post("/menu", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(request_dto: CreateMenuItemRequest) -> MenuItemResponse:
    return CreateMenuItem(menu_repository=get_container().menu_repository).execute(request_dto)


@router.patch("/menu/{item_id}", response_model=MenuItemResponse)
def update_menu_item(item_id: int, request_dto: UpdateMenuItemRequest) -> MenuItemResponse:
    use_case = UpdateMenuItem(menu_repository=get_container().menu_repository)
    return use_case.execute(MenuItemId(item_id), request_dto)
