from __future__ import annotations

from fastapi import APIRouter, Response, status

from orderdesk.application.dto.requests import CreatePopupRequest, UpdatePopupRequest
from orderdesk.application.dto.responses import PopupResponse
from orderdesk.application.use_cases.popups import (
    CreatePopup,
    DeletePopup,
    GetActivePopup,
    GetPopup,
    ListPopups,
    UpdatePopup,
)
from orderdesk.domain.common.ids import PopupId
from orderdesk.infrastructure.container import get_container

router = APIRouter(tags=["popups"])


def _repository():
    return get_container().popup_repository


@router.get("/popups", response_model=list[PopupResponse])
def list_popups() -> list[PopupResponse]:
    return ListPopups(popup_repository=_repository()).execute()


@router.get("/popups/active", response_model=PopupResponse)
def get_active_popup() -> PopupResponse:
    return GetActivePopup(popup_repository=_repository()).execute()


@router.get("/popups/{popup_id}", response_model=PopupResponse)
def get_popup(popup_id: int) -> PopupResponse:
    return GetPopup(popup_repository=_repository()).execute(PopupId(popup_id))


@router.post("/popups", response_model=PopupResponse, status_code=status.HTTP_201_CREATED)
def create_popup(request_dto: CreatePopupRequest) -> PopupResponse:
    return CreatePopup(popup_repository=_repository()).execute(request_dto)


@router.patch("/popups/{popup_id}", response_model=PopupResponse)
def update_popup(popup_id: int, request_dto: UpdatePopupRequest) -> PopupResponse:
    return UpdatePopup(popup_repository=_repository()).execute(PopupId(popup_id), request_dto)


@router.delete("/popups/{popup_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_popup(popup_id: int) -> Response:
    DeletePopup(popup_repository=_repository()).execute(PopupId(popup_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
