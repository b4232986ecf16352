from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Engine, or_, select
from sqlalchemy.orm import Session

from orderdesk.application.ports.repositories import PopupRepository
from orderdesk.domain.common.ids import PopupId
from orderdesk.domain.popup.entities import Popup, PopupDraft
from orderdesk.infrastructure.db.models.catalog import PopupModel
from orderdesk.infrastructure.db.session import get_engine
from orderdesk.infrastructure.db.support import ensure_utc, ensure_utc_or_none, translate_errors


class SqlAlchemyPopupRepository(PopupRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_all(self) -> list[Popup]:
        statement = select(PopupModel).order_by(PopupModel.id)
        with translate_errors("list popups"), Session(self._engine) as session:
            return [_to_domain(model) for model in session.execute(statement).scalars()]

    def get(self, popup_id: PopupId) -> Popup | None:
        with translate_errors("get popup"), Session(self._engine) as session:
            model = session.get(PopupModel, int(popup_id))
            return _to_domain(model) if model is not None else None

    def get_active(self, now: datetime) -> Popup | None:
        statement = (
            select(PopupModel)
            .where(
                PopupModel.is_active.is_(True),
                or_(PopupModel.start_date.is_(None), PopupModel.start_date <= now),
                or_(PopupModel.end_date.is_(None), PopupModel.end_date >= now),
            )
            .order_by(PopupModel.id)
            .limit(1)
        )
        with translate_errors("get active popup"), Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            return _to_domain(model) if model is not None else None

    def create(self, draft: PopupDraft, now: datetime) -> Popup:
        model = PopupModel(
            title=draft.title,
            description=draft.description,
            image_url=draft.image_url,
            is_active=draft.is_active,
            start_date=draft.start_date,
            end_date=draft.end_date,
            created_at=now,
            updated_at=now,
        )
        with translate_errors("create popup"), Session(self._engine) as session:
            session.add(model)
            session.commit()
            return _to_domain(model)

    def update(self, popup_id: PopupId, changes: dict[str, Any], now: datetime) -> Popup | None:
        with translate_errors("update popup"), Session(self._engine) as session:
            model = session.get(PopupModel, int(popup_id))
            if model is None:
                return None
            updated = _to_domain(model).with_changes(changes, now)
            model.title = updated.title
            model.description = updated.description
            model.image_url = updated.image_url
            model.is_active = updated.is_active
            model.start_date = updated.start_date
            model.end_date = updated.end_date
            model.updated_at = updated.updated_at
            session.commit()
            return updated

    def delete(self, popup_id: PopupId) -> bool:
        with translate_errors("delete popup"), Session(self._engine) as session:
            model = session.get(PopupModel, int(popup_id))
            if model is None:
                return False
            session.delete(model)
            session.commit()
            return True


def _to_domain(model: PopupModel) -> Popup:
    return Popup(
        popup_id=PopupId(model.id),
        title=model.title,
        description=model.description,
        image_url=model.image_url,
        is_active=model.is_active,
        start_date=ensure_utc_or_none(model.start_date),
        end_date=ensure_utc_or_none(model.end_date),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )
