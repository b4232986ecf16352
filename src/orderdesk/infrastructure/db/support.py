from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError

from orderdesk.application.errors import PersistenceError


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise PersistenceError(f"{operation} failed: storage unavailable") from exc


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def ensure_utc_or_none(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(value)
