from __future__ import annotations

import asyncio
import logging

from orderdesk.application.ports.publisher import ORDER_EVENTS_CHANNEL
from orderdesk.infrastructure.container import build_notify_order_event
from orderdesk.infrastructure.messaging.redis_client import redis_url
from orderdesk.infrastructure.messaging.redis_event_listener import consume_order_events
from orderdesk.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging()
    url = redis_url()
    if url is None:
        logger.error("notification_worker_not_started", extra={"reason": "REDIS_URL missing"})
        raise SystemExit(1)

    notify = build_notify_order_event()
    logger.info("notification_worker_started", extra={"channel": ORDER_EVENTS_CHANNEL})
    try:
        asyncio.run(consume_order_events(url, ORDER_EVENTS_CHANNEL, notify.execute))
    except KeyboardInterrupt:
        logger.info("notification_worker_stopped")


if __name__ == "__main__":
    main()
