from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from orderdesk.application.ports.repositories import MenuRepository
from orderdesk.domain.common.ids import MenuItemId
from orderdesk.domain.menu.entities import MenuItem, MenuItemDraft
from orderdesk.infrastructure.db.models.catalog import MenuItemModel
from orderdesk.infrastructure.db.session import get_engine
from orderdesk.infrastructure.db.support import translate_errors


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_items(self) -> list[MenuItem]:
        statement = select(MenuItemModel).order_by(MenuItemModel.id)
        with translate_errors("list menu items"), Session(self._engine) as session:
            return [_to_domain(model) for model in session.execute(statement).scalars()]

    def list_available(self) -> list[MenuItem]:
        statement = (
            select(MenuItemModel)
            .where(MenuItemModel.available.is_(True), MenuItemModel.is_visible.is_(True))
            .order_by(MenuItemModel.id)
        )
        with translate_errors("list available menu items"), Session(self._engine) as session:
            return [_to_domain(model) for model in session.execute(statement).scalars()]

    def get(self, item_id: MenuItemId) -> MenuItem | None:
        with translate_errors("get menu item"), Session(self._engine) as session:
            model = session.get(MenuItemModel, int(item_id))
            return _to_domain(model) if model is not None else None

    def get_many(self, item_ids: Iterable[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        wanted = sorted({int(item_id) for item_id in item_ids})
        if not wanted:
            return {}
        statement = select(MenuItemModel).where(MenuItemModel.id.in_(wanted))
        with translate_errors("get menu items"), Session(self._engine) as session:
            items = [_to_domain(model) for model in session.execute(statement).scalars()]
        return {item.item_id: item for item in items}

    def create(self, draft: MenuItemDraft) -> MenuItem:
        model = MenuItemModel(
            name=draft.name,
            price=draft.price,
            image=draft.image,
            category=draft.category,
            available=draft.available,
            is_visible=draft.is_visible,
        )
        with translate_errors("create menu item"), Session(self._engine) as session:
            session.add(model)
            session.commit()
            return _to_domain(model)

    def update(self, item_id: MenuItemId, changes: dict[str, Any]) -> MenuItem | None:
        with translate_errors("update menu item"), Session(self._engine) as session:
            model = session.get(MenuItemModel, int(item_id), with_for_update=True)
            if model is None:
                return None
            updated = _to_domain(model).with_changes(changes)
            model.name = updated.name
            model.price = updated.price
            model.image = updated.image
            model.category = updated.category
            model.available = updated.available
            model.is_visible = updated.is_visible
            session.commit()
            return updated


def _to_domain(model: MenuItemModel) -> MenuItem:
    return MenuItem(
        item_id=MenuItemId(model.id),
        name=model.name,
        price=model.price,
        image=model.image,
        category=model.category,
        available=model.available,
        is_visible=model.is_visible,
    )
