from __future__ import annotations

from sqlalchemy import Engine, select

from orderdesk.application.ports.repositories import OrderNumberSequence
from orderdesk.infrastructure.db.models.order import ORDER_NUMBER_SEQUENCE
from orderdesk.infrastructure.db.session import get_engine
from orderdesk.infrastructure.db.support import translate_errors


class PostgresOrderNumberSequence(OrderNumberSequence):
    """nextval() is never rolled back, so values are unique across workers but may skip."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def next_value(self) -> int:
        with translate_errors("allocate order number"), self._engine.connect() as connection:
            value = connection.execute(select(ORDER_NUMBER_SEQUENCE.next_value())).scalar_one()
            connection.commit()
        return int(value)
