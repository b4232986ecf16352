from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from orderdesk.application.dto.requests import CreatePopupRequest, UpdatePopupRequest
from orderdesk.application.dto.responses import PopupResponse
from orderdesk.application.errors import PopupNotFoundError, ValidationError
from orderdesk.application.mappers.popup_mapper import to_popup_response
from orderdesk.application.ports.repositories import PopupRepository
from orderdesk.domain.common.ids import PopupId
from orderdesk.domain.popup.entities import PopupDraft


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Any) -> Any:
    # Naive timestamps from the admin form are taken as UTC.
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ListPopups:
    def __init__(self, popup_repository: PopupRepository) -> None:
        self._popup_repository = popup_repository

    def execute(self) -> list[PopupResponse]:
        return [to_popup_response(popup) for popup in self._popup_repository.list_all()]


class GetPopup:
    def __init__(self, popup_repository: PopupRepository) -> None:
        self._popup_repository = popup_repository

    def execute(self, popup_id: PopupId) -> PopupResponse:
        popup = self._popup_repository.get(popup_id)
        if popup is None:
            raise PopupNotFoundError(f"popup {popup_id} not found")
        return to_popup_response(popup)


class GetActivePopup:
    def __init__(
        self,
        popup_repository: PopupRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._popup_repository = popup_repository
        self._clock = clock

    def execute(self) -> PopupResponse:
        popup = self._popup_repository.get_active(self._clock())
        if popup is None:
            raise PopupNotFoundError("no active popup")
        return to_popup_response(popup)


class CreatePopup:
    def __init__(
        self,
        popup_repository: PopupRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._popup_repository = popup_repository
        self._clock = clock

    def execute(self, request_dto: CreatePopupRequest) -> PopupResponse:
        values = {key: _as_utc(value) for key, value in request_dto.model_dump().items()}
        try:
            draft = PopupDraft(**values)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return to_popup_response(self._popup_repository.create(draft, now=self._clock()))


class UpdatePopup:
    def __init__(
        self,
        popup_repository: PopupRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._popup_repository = popup_repository
        self._clock = clock

    def execute(self, popup_id: PopupId, request_dto: UpdatePopupRequest) -> PopupResponse:
        changes = {
            key: _as_utc(value)
            for key, value in request_dto.model_dump(exclude_unset=True).items()
        }
        for required in ("title", "is_active"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be null")
        try:
            popup = self._popup_repository.update(popup_id, changes, now=self._clock())
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if popup is None:
            raise PopupNotFoundError(f"popup {popup_id} not found")
        return to_popup_response(popup)


class DeletePopup:
    def __init__(self, popup_repository: PopupRepository) -> None:
        self._popup_repository = popup_repository

    def execute(self, popup_id: PopupId) -> None:
        if not self._popup_repository.delete(popup_id):
            raise PopupNotFoundError(f"popup {popup_id} not found")
