from __future__ import annotations

import asyncio
import logging
from typing import Callable

from redis import asyncio as redis_asyncio

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], object]


def _decode_value(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


async def consume_order_events(redis_url: str, channel: str, handler: MessageHandler) -> None:
    """Subscribe to ``channel`` and hand every message to ``handler`` in a worker thread.

    Reconnects with exponential backoff (capped at 5s) until cancelled.
    """
    backoff_seconds = 1.0
    while True:
        client: redis_asyncio.Redis | None = None
        pubsub: redis_asyncio.client.PubSub | None = None
        try:
            client = redis_asyncio.from_url(redis_url)
            pubsub = client.pubsub()
            await pubsub.subscribe(channel)
            logger.info("order_events_subscribed", extra={"channel": channel})
            backoff_seconds = 1.0

            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    await asyncio.sleep(0.05)
                    continue

                payload = _decode_value(message.get("data"))
                if not payload:
                    continue

                await asyncio.to_thread(handler, payload)
        except asyncio.CancelledError:
            logger.info("order_events_consumer_cancelled")
            raise
        except Exception:
            logger.exception(
                "order_events_consumer_error",
                extra={"backoff_seconds": backoff_seconds},
            )
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, 5.0)
        finally:
            if pubsub is not None:
                await pubsub.aclose()
            if client is not None:
                await client.aclose()
