from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orderdesk.application.ports.repositories import CategoryRepository, DuplicateCategoryNameError
from orderdesk.domain.common.ids import CategoryId
from orderdesk.domain.menu.entities import Category, CategoryDraft
from orderdesk.infrastructure.db.models.catalog import CategoryModel
from orderdesk.infrastructure.db.session import get_engine
from orderdesk.infrastructure.db.support import ensure_utc, translate_errors


class SqlAlchemyCategoryRepository(CategoryRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_all(self) -> list[Category]:
        statement = select(CategoryModel).order_by(CategoryModel.sort_order, CategoryModel.id)
        with translate_errors("list categories"), Session(self._engine) as session:
            return [_to_domain(model) for model in session.execute(statement).scalars()]

    def get(self, category_id: CategoryId) -> Category | None:
        with translate_errors("get category"), Session(self._engine) as session:
            model = session.get(CategoryModel, int(category_id))
            return _to_domain(model) if model is not None else None

    def create(self, draft: CategoryDraft, now: datetime) -> Category:
        model = CategoryModel(
            name=draft.name,
            display_name=draft.display_name,
            is_visible=draft.is_visible,
            sort_order=draft.sort_order,
            created_at=now,
        )
        with translate_errors("create category"), Session(self._engine) as session:
            session.add(model)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateCategoryNameError(
                    f"category name already exists: {draft.name}"
                ) from exc
            return _to_domain(model)

    def update(self, category_id: CategoryId, changes: dict[str, Any]) -> Category | None:
        with translate_errors("update category"), Session(self._engine) as session:
            model = session.get(CategoryModel, int(category_id))
            if model is None:
                return None
            updated = _to_domain(model).with_changes(changes)
            model.name = updated.name
            model.display_name = updated.display_name
            model.is_visible = updated.is_visible
            model.sort_order = updated.sort_order
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateCategoryNameError(
                    f"category name already exists: {updated.name}"
                ) from exc
            return updated

    def delete(self, category_id: CategoryId) -> bool:
        with translate_errors("delete category"), Session(self._engine) as session:
            model = session.get(CategoryModel, int(category_id))
            if model is None:
                return False
            session.delete(model)
            session.commit()
            return True


def _to_domain(model: CategoryModel) -> Category:
    return Category(
        category_id=CategoryId(model.id),
        name=model.name,
        display_name=model.display_name,
        is_visible=model.is_visible,
        sort_order=model.sort_order,
        created_at=ensure_utc(model.created_at),
    )
