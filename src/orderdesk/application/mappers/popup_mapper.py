from __future__ import annotations

from orderdesk.application.dto.responses import PopupResponse
from orderdesk.domain.popup.entities import Popup


def to_popup_response(popup: Popup) -> PopupResponse:
    return PopupResponse(
        id=int(popup.popup_id),
        title=popup.title,
        description=popup.description,
        imageUrl=popup.image_url,
        isActive=popup.is_active,
        startDate=popup.start_date,
        endDate=popup.end_date,
        createdAt=popup.created_at,
        updatedAt=popup.updated_at,
    )
