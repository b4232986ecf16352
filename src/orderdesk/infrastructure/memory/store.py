"""Process-local storage used when no database is configured.

All state lives in one ``InMemoryStore`` guarded by a single re-entrant lock.
Ids come from counters owned by the store, never from ``len()`` of a
collection. When a snapshot path is given the whole state is written to a JSON
file after every committed write (write to a temp file, then ``os.replace``)
and loaded back on start.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from orderdesk.application.errors import PersistenceError
from orderdesk.domain.menu.entities import Category, MenuItem
from orderdesk.domain.order.entities import Order
from orderdesk.domain.popup.entities import Popup

logger = logging.getLogger(__name__)

COUNTER_NAMES = ("category", "menu_item", "popup", "order", "order_item", "order_number")

_MUTABLE_STATE = (
    "categories",
    "menu_items",
    "popups",
    "orders",
    "order_ids_by_number",
    "_counters",
)


@dataclass
class StoreSnapshot:
    counters: dict[str, int] = field(default_factory=dict)
    categories: list[Category] = field(default_factory=list)
    menu_items: list[MenuItem] = field(default_factory=list)
    popups: list[Popup] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)


_SNAPSHOT_ADAPTER = TypeAdapter(StoreSnapshot)


class InMemoryStore:
    def __init__(self, snapshot_path: str | Path | None = None) -> None:
        self.lock = threading.RLock()
        self.categories: dict[int, Category] = {}
        self.menu_items: dict[int, MenuItem] = {}
        self.popups: dict[int, Popup] = {}
        self.orders: dict[int, Order] = {}
        self.order_ids_by_number: dict[str, int] = {}
        self._counters = {name: 0 for name in COUNTER_NAMES}
        self._snapshot_path = Path(snapshot_path) if snapshot_path else None
        if self._snapshot_path is not None and self._snapshot_path.exists():
            self._load()

    def next_id(self, counter: str) -> int:
        with self.lock:
            self._counters[counter] += 1
            return self._counters[counter]

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock for a mutation and persist the snapshot once it succeeds.

        If the mutation or the snapshot write fails, the in-memory state is put
        back to what it was before the block, so readers never see it.
        """
        with self.lock:
            saved = self._capture()
            try:
                yield
                self.flush()
            except BaseException:
                self._restore(saved)
                raise

    def flush(self) -> None:
        if self._snapshot_path is None:
            return
        with self.lock:
            payload = _SNAPSHOT_ADAPTER.dump_json(self._snapshot(), indent=2)
            directory = self._snapshot_path.parent
            try:
                directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self._snapshot_path.name}.",
                    suffix=".tmp",
                    dir=directory,
                )
                try:
                    with os.fdopen(fd, "wb") as handle:
                        handle.write(payload)
                        handle.flush()
                        os.fsync(handle.fileno())
                    os.replace(tmp_name, self._snapshot_path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as exc:
                logger.error(
                    "memory_snapshot_write_failed",
                    extra={"path": str(self._snapshot_path), "error": str(exc)},
                )
                raise PersistenceError("could not write the storage snapshot") from exc

    def _capture(self) -> dict[str, dict]:
        # Values are frozen dataclasses, so shallow copies are enough.
        return {name: dict(getattr(self, name)) for name in _MUTABLE_STATE}

    def _restore(self, saved: dict[str, dict]) -> None:
        for name, value in saved.items():
            setattr(self, name, value)

    def _snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            counters=dict(self._counters),
            categories=list(self.categories.values()),
            menu_items=list(self.menu_items.values()),
            popups=list(self.popups.values()),
            orders=list(self.orders.values()),
        )

    def _load(self) -> None:
        assert self._snapshot_path is not None
        try:
            snapshot = _SNAPSHOT_ADAPTER.validate_json(self._snapshot_path.read_bytes())
        except (OSError, SchemaValidationError) as exc:
            raise PersistenceError(
                f"could not load the storage snapshot from {self._snapshot_path}"
            ) from exc

        self.categories = {int(item.category_id): item for item in snapshot.categories}
        self.menu_items = {int(item.item_id): item for item in snapshot.menu_items}
        self.popups = {int(item.popup_id): item for item in snapshot.popups}
        self.orders = {int(order.order_id): order for order in snapshot.orders}
        self.order_ids_by_number = {
            str(order.order_number): int(order.order_id) for order in snapshot.orders
        }
        # Counters never fall behind the highest id already issued.
        observed = {
            "category": max(self.categories, default=0),
            "menu_item": max(self.menu_items, default=0),
            "popup": max(self.popups, default=0),
            "order": max(self.orders, default=0),
            "order_item": max(
                (int(item.item_id) for order in snapshot.orders for item in order.items),
                default=0,
            ),
        }
        for name in COUNTER_NAMES:
            self._counters[name] = max(snapshot.counters.get(name, 0), observed.get(name, 0))
        logger.info(
            "memory_snapshot_loaded",
            extra={"path": str(self._snapshot_path), "count": len(self.orders)},
        )
