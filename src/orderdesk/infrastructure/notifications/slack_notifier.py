from __future__ import annotations

import logging
import os

import httpx

from orderdesk.application.errors import NotificationError
from orderdesk.application.ports.notifier import ChatMessage, OrderNotifier

logger = logging.getLogger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


class SlackNotifier(OrderNotifier):
    """Posts one message per call to a Slack channel. No retries."""

    def __init__(
        self,
        token: str,
        channel_id: str,
        timeout_seconds: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._token = token
        self._channel_id = channel_id
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def send(self, message: ChatMessage) -> None:
        body: dict[str, object] = {"channel": self._channel_id, "text": message.text}
        if message.blocks:
            body["blocks"] = message.blocks

        try:
            response = self._client.post(
                SLACK_POST_MESSAGE_URL,
                json=body,
                headers={"Authorization": f"Bearer {self._token}"},
            )
        except httpx.HTTPError as exc:
            raise NotificationError("slack request failed", details={"error": str(exc)}) from exc

        if response.status_code >= 400:
            raise NotificationError(
                "slack returned an error status",
                details={"status_code": response.status_code},
            )
        try:
            result = response.json()
        except ValueError as exc:
            raise NotificationError("slack returned a non-JSON body") from exc
        if not result.get("ok"):
            raise NotificationError(
                "slack rejected the message",
                details={"error": result.get("error", "unknown")},
            )


def build_notifier() -> SlackNotifier | None:
    token = os.getenv("SLACK_BOT_TOKEN")
    channel_id = os.getenv("SLACK_CHANNEL_ID")
    if not token or not channel_id:
        logger.warning(
            "slack_notifier_disabled",
            extra={"reason": "SLACK_BOT_TOKEN or SLACK_CHANNEL_ID missing"},
        )
        return None
    return SlackNotifier(token=token, channel_id=channel_id)
