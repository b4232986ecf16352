from __future__ import annotations

from datetime import datetime, timezone

from orderdesk.application.dto.requests import CreateCategoryRequest, UpdateCategoryRequest
from orderdesk.application.dto.responses import CategoryResponse
from orderdesk.application.errors import (
    CategoryNameTakenError,
    CategoryNotFoundError,
    ValidationError,
)
from orderdesk.application.mappers.menu_mapper import to_category_response
from orderdesk.application.ports.repositories import CategoryRepository, DuplicateCategoryNameError
from orderdesk.domain.common.ids import CategoryId
from orderdesk.domain.menu.entities import CategoryDraft


class ListCategories:
    def __init__(self, category_repository: CategoryRepository) -> None:
        self._category_repository = category_repository

    def execute(self, visible_only: bool = False) -> list[CategoryResponse]:
        categories = self._category_repository.list_all()
        if visible_only:
            categories = [category for category in categories if category.is_visible]
        return [to_category_response(category) for category in categories]


class GetCategory:
    def __init__(self, category_repository: CategoryRepository) -> None:
        self._category_repository = category_repository

    def execute(self, category_id: CategoryId) -> CategoryResponse:
        category = self._category_repository.get(category_id)
        if category is None:
            raise CategoryNotFoundError(f"category {category_id} not found")
        return to_category_response(category)


class CreateCategory:
    def __init__(self, category_repository: CategoryRepository) -> None:
        self._category_repository = category_repository

    def execute(self, request_dto: CreateCategoryRequest) -> CategoryResponse:
        try:
            draft = CategoryDraft(**request_dto.model_dump())
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        try:
            category = self._category_repository.create(draft, now=datetime.now(timezone.utc))
        except DuplicateCategoryNameError as exc:
            raise CategoryNameTakenError(str(exc), details={"name": draft.name}) from exc
        return to_category_response(category)


class UpdateCategory:
    def __init__(self, category_repository: CategoryRepository) -> None:
        self._category_repository = category_repository

    def execute(
        self,
        category_id: CategoryId,
        request_dto: UpdateCategoryRequest,
    ) -> CategoryResponse:
        changes = request_dto.model_dump(exclude_unset=True, exclude_none=True)
        try:
            category = self._category_repository.update(category_id, changes)
        except DuplicateCategoryNameError as exc:
            raise CategoryNameTakenError(str(exc), details={"name": changes.get("name")}) from exc
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if category is None:
            raise CategoryNotFoundError(f"category {category_id} not found")
        return to_category_response(category)


class DeleteCategory:
    def __init__(self, category_repository: CategoryRepository) -> None:
        self._category_repository = category_repository

    def execute(self, category_id: CategoryId) -> None:
        if not self._category_repository.delete(category_id):
            raise CategoryNotFoundError(f"category {category_id} not found")
