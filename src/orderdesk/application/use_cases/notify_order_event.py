from __future__ import annotations

import logging
from zoneinfo import ZoneInfo

from pydantic import ValidationError as PayloadValidationError

from orderdesk.application.dto.responses import OrderResponse
from orderdesk.application.errors import NotificationError
from orderdesk.application.mappers.event_envelope import parse_envelope
from orderdesk.application.mappers.notification_message import (
    render_order_placed,
    render_status_changed,
)
from orderdesk.application.metrics.order_lifecycle import record_notification
from orderdesk.application.ports.notifier import ChatMessage, OrderNotifier
from orderdesk.domain.order.events import ORDER_PLACED, ORDER_STATUS_CHANGED

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_TIMEZONE = "Asia/Ho_Chi_Minh"


class NotifyOrderEvent:
    """Turn one order event envelope into at most one staff chat message.

    Returns True when a message was delivered. Every failure is logged and
    reported as False; nothing is raised back to the event consumer.
    """

    def __init__(
        self,
        notifier: OrderNotifier | None,
        timezone_name: str = DEFAULT_NOTIFICATION_TIMEZONE,
    ) -> None:
        self._notifier = notifier
        self._tz = ZoneInfo(timezone_name)

    def execute(self, message: str) -> bool:
        try:
            envelope = parse_envelope(message)
        except ValueError:
            logger.warning("order_event_malformed", exc_info=True)
            record_notification("unknown", "malformed")
            return False

        event_type = envelope["event_type"]
        try:
            chat_message = self._render(event_type, envelope["payload"])
        except (KeyError, PayloadValidationError):
            logger.warning(
                "order_event_malformed",
                exc_info=True,
                extra={"event_type": event_type},
            )
            record_notification(event_type, "malformed")
            return False
        if chat_message is None:
            record_notification(event_type, "ignored")
            return False

        if self._notifier is None:
            logger.info("order_notification_skipped", extra={"event_type": event_type})
            record_notification(event_type, "disabled")
            return False

        try:
            self._notifier.send(chat_message)
        except NotificationError:
            logger.warning(
                "order_notification_failed",
                exc_info=True,
                extra={"event_type": event_type},
            )
            record_notification(event_type, "failed")
            return False

        record_notification(event_type, "sent")
        logger.info("order_notification_sent", extra={"event_type": event_type})
        return True

    def _render(self, event_type: str, payload: dict) -> ChatMessage | None:
        if event_type == ORDER_PLACED:
            order = OrderResponse.model_validate(payload["order"])
            return render_order_placed(order, self._tz)
        if event_type == ORDER_STATUS_CHANGED:
            order = OrderResponse.model_validate(payload["order"])
            return render_status_changed(order, payload.get("previousStatus"))
        return None
