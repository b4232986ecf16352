from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from orderdesk.domain.common.ids import PopupId


@dataclass(frozen=True)
class PopupDraft:
    title: str
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None

    def __post_init__(self) -> None:
        _check_popup_fields(self.title, self.start_date, self.end_date)


@dataclass(frozen=True)
class Popup:
    popup_id: PopupId
    title: str
    description: str | None
    image_url: str | None
    is_active: bool
    start_date: datetime | None
    end_date: datetime | None
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        _check_popup_fields(self.title, self.start_date, self.end_date)

    def is_live(self, now: datetime) -> bool:
        if not self.is_active:
            return False
        if self.start_date is not None and self.start_date > now:
            return False
        if self.end_date is not None and self.end_date < now:
            return False
        return True

    def with_changes(self, changes: dict[str, Any], now: datetime) -> Popup:
        immutable = {"popup_id", "created_at", "updated_at"}
        blocked = immutable.intersection(changes)
        if blocked:
            raise ValueError(f"immutable fields: {', '.join(sorted(blocked))}")
        return replace(self, **changes, updated_at=now)

    @classmethod
    def from_draft(cls, popup_id: PopupId, draft: PopupDraft, now: datetime) -> Popup:
        return cls(
            popup_id=popup_id,
            title=draft.title,
            description=draft.description,
            image_url=draft.image_url,
            is_active=draft.is_active,
            start_date=draft.start_date,
            end_date=draft.end_date,
            created_at=now,
            updated_at=now,
        )


def first_live_popup(popups: list[Popup], now: datetime) -> Popup | None:
    for popup in sorted(popups, key=lambda item: item.popup_id):
        if popup.is_live(now):
            return popup
    return None


def _check_popup_fields(
    title: str,
    start_date: datetime | None,
    end_date: datetime | None,
) -> None:
    if not title.strip():
        raise ValueError("title must be non-empty")
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValueError("end_date must not be before start_date")
