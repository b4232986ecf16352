from __future__ import annotations

import logging
import queue
import threading
from typing import Callable

from orderdesk.application.ports.publisher import EventPublisher

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], object]

_STOP = object()


class InProcessEventBus(EventPublisher):
    """Queue-backed publisher for single-process deployments without Redis.

    ``publish`` only enqueues; a daemon thread started with ``start`` drains the
    queue and calls the handler, so request threads never wait on delivery.
    """

    def __init__(self, handler: MessageHandler | None = None) -> None:
        self._handler = handler
        self._queue: queue.Queue[object] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def publish(self, channel: str, message: str) -> None:
        self._queue.put(message)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._thread = threading.Thread(
                target=self._run,
                name="orderdesk-event-bus",
                daemon=True,
            )
            self._thread.start()
        logger.info("event_bus_started")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join(timeout_seconds)
        logger.info("event_bus_stopped", extra={"count": self._queue.qsize()})

    def drain(self) -> int:
        """Deliver everything queued so far on the calling thread."""
        delivered = 0
        while True:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                return delivered
            if message is _STOP:
                continue
            self._deliver(message)
            delivered += 1

    def _run(self) -> None:
        while True:
            message = self._queue.get()
            if message is _STOP:
                return
            self._deliver(message)

    def _deliver(self, message: object) -> None:
        if self._handler is None:
            logger.warning("event_bus_no_handler")
            return
        try:
            self._handler(str(message))
        except Exception:
            logger.exception("event_bus_handler_failed")
