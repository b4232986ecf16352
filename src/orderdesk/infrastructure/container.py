"""Startup wiring: picks the storage backend and the event publisher once per process."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from orderdesk.application.ports.publisher import EventPublisher
from orderdesk.application.ports.repositories import (
    CategoryRepository,
    MenuRepository,
    OrderNumberSequence,
    OrderRepository,
    PopupRepository,
)
from orderdesk.application.use_cases.notify_order_event import (
    DEFAULT_NOTIFICATION_TIMEZONE,
    NotifyOrderEvent,
)
from orderdesk.application.use_cases.seed_catalog import SeedCatalog
from orderdesk.domain.order.numbering import DEFAULT_ORDER_NUMBER_PREFIX
from orderdesk.infrastructure.messaging.local_bus import InProcessEventBus
from orderdesk.infrastructure.messaging.redis_client import ping_redis, redis_url
from orderdesk.infrastructure.notifications.slack_notifier import build_notifier

logger = logging.getLogger(__name__)

POSTGRES_BACKEND = "postgres"
MEMORY_BACKEND = "memory"


@dataclass(frozen=True)
class Container:
    backend: str
    menu_repository: MenuRepository
    category_repository: CategoryRepository
    popup_repository: PopupRepository
    order_repository: OrderRepository
    number_sequence: OrderNumberSequence
    publisher: EventPublisher
    storage_ready: Callable[[], bool]
    order_number_prefix: str = DEFAULT_ORDER_NUMBER_PREFIX

    @property
    def event_bus(self) -> InProcessEventBus | None:
        if isinstance(self.publisher, InProcessEventBus):
            return self.publisher
        return None

    def redis_ready(self) -> bool | None:
        if redis_url() is None:
            return None
        return ping_redis(timeout_seconds=1.0)


def storage_backend() -> str:
    configured = os.getenv("STORAGE_BACKEND", "").strip().lower()
    if not configured:
        return POSTGRES_BACKEND if os.getenv("DATABASE_URL") else MEMORY_BACKEND
    if configured not in {POSTGRES_BACKEND, MEMORY_BACKEND}:
        raise RuntimeError(f"unsupported STORAGE_BACKEND: {configured}")
    return configured


def build_notify_order_event() -> NotifyOrderEvent:
    return NotifyOrderEvent(
        notifier=build_notifier(),
        timezone_name=os.getenv("NOTIFICATION_TIMEZONE", DEFAULT_NOTIFICATION_TIMEZONE),
    )


def _build_publisher() -> EventPublisher:
    if redis_url() is not None:
        from orderdesk.infrastructure.messaging.redis_publisher import RedisEventPublisher

        return RedisEventPublisher()
    return InProcessEventBus(handler=build_notify_order_event().execute)


def _build_postgres_container(publisher: EventPublisher, prefix: str) -> Container:
    from orderdesk.infrastructure.db.repositories.category_repo import (
        SqlAlchemyCategoryRepository,
    )
    from orderdesk.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
    from orderdesk.infrastructure.db.repositories.order_number_sequence import (
        PostgresOrderNumberSequence,
    )
    from orderdesk.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
    from orderdesk.infrastructure.db.repositories.popup_repo import SqlAlchemyPopupRepository
    from orderdesk.infrastructure.db.session import get_engine, ping_database

    engine = get_engine()
    return Container(
        backend=POSTGRES_BACKEND,
        menu_repository=SqlAlchemyMenuRepository(engine),
        category_repository=SqlAlchemyCategoryRepository(engine),
        popup_repository=SqlAlchemyPopupRepository(engine),
        order_repository=SqlAlchemyOrderRepository(engine),
        number_sequence=PostgresOrderNumberSequence(engine),
        publisher=publisher,
        storage_ready=lambda: ping_database(timeout_seconds=1.0),
        order_number_prefix=prefix,
    )


def _build_memory_container(publisher: EventPublisher, prefix: str) -> Container:
    from orderdesk.infrastructure.memory.repositories import (
        InMemoryCategoryRepository,
        InMemoryMenuRepository,
        InMemoryOrderRepository,
        InMemoryPopupRepository,
        MemoryOrderNumberSequence,
    )
    from orderdesk.infrastructure.memory.store import InMemoryStore

    store = InMemoryStore(snapshot_path=os.getenv("MEMORY_SNAPSHOT_PATH") or None)
    container = Container(
        backend=MEMORY_BACKEND,
        menu_repository=InMemoryMenuRepository(store),
        category_repository=InMemoryCategoryRepository(store),
        popup_repository=InMemoryPopupRepository(store),
        order_repository=InMemoryOrderRepository(store),
        number_sequence=MemoryOrderNumberSequence(store),
        publisher=publisher,
        storage_ready=lambda: True,
        order_number_prefix=prefix,
    )
    if _flag("MEMORY_SEED", default=True):
        SeedCatalog(
            category_repository=container.category_repository,
            menu_repository=container.menu_repository,
        ).execute()
    return container


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def get_container() -> Container:
    backend = storage_backend()
    prefix = os.getenv("ORDER_NUMBER_PREFIX", DEFAULT_ORDER_NUMBER_PREFIX)
    publisher = _build_publisher()
    if backend == POSTGRES_BACKEND:
        container = _build_postgres_container(publisher, prefix)
    else:
        container = _build_memory_container(publisher, prefix)
    logger.info(
        "container_ready",
        extra={"backend": container.backend, "publisher": type(publisher).__name__},
    )
    return container
