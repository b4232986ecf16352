from __future__ import annotations

from fastapi import APIRouter, Query, Response, status

from orderdesk.application.dto.requests import CreateCategoryRequest, UpdateCategoryRequest
from orderdesk.application.dto.responses import CategoryResponse
from orderdesk.application.use_cases.categories import (
    CreateCategory,
    DeleteCategory,
    GetCategory,
    ListCategories,
    UpdateCategory,
)
from orderdesk.domain.common.ids import CategoryId
from orderdesk.infrastructure.container import get_container

router = APIRouter(tags=["categories"])


def _repository():
    return get_container().category_repository


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(
    visible_only: bool = Query(default=False, alias="visibleOnly"),
) -> list[CategoryResponse]:
    return ListCategories(category_repository=_repository()).execute(visible_only=visible_only)


@router.get("/categories/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int) -> CategoryResponse:
    return GetCategory(category_repository=_repository()).execute(CategoryId(category_id))


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(request_dto: CreateCategoryRequest) -> CategoryResponse:
    return CreateCategory(category_repository=_repository()).execute(request_dto)


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
def update_category(category_id: int, request_dto: UpdateCategoryRequest) -> CategoryResponse:
    use_case = UpdateCategory(category_repository=_repository())
    return use_case.execute(CategoryId(category_id), request_dto)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int) -> Response:
    DeleteCategory(category_repository=_repository()).execute(CategoryId(category_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
