from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy import Engine, func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from qrmenu.application.ports.repositories import CounterUnavailableError, OrderCounterRepository
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.domain.order.numbering import counter_key
from qrmenu.infrastructure.db.models.counter import OrderCounterModel
from qrmenu.infrastructure.db.session import get_engine

logger = logging.getLogger(__name__)

_UPSERT_BY_DIALECT: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class SqlAlchemyOrderCounterRepository(OrderCounterRepository):
    """Per-restaurant, per-day order numbers backed by one counter row.

    Each increment is a single ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING``
    statement, so concurrent callers are serialized on the row by the database
    and every caller sees a distinct value with no gaps.
    """

    def __init__(self, engine: Engine | None = None, max_attempts: int = 3) -> None:
        self._engine = engine or get_engine()
        self._max_attempts = max(1, max_attempts)

    def next_value(self, restaurant_id: RestaurantId, day: str) -> int:
        key = counter_key(restaurant_id, day)
        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._increment(key=key, restaurant_id=str(restaurant_id), day=day)
            except DBAPIError as exc:
                last_error = exc
                logger.warning(
                    "order_counter_increment_failed",
                    extra={"counter_key": key, "attempt": attempt},
                )

        raise CounterUnavailableError(f"order counter {key} is unavailable") from last_error

    def current_value(self, restaurant_id: RestaurantId, day: str) -> int:
        with Session(self._engine) as session:
            model = session.get(OrderCounterModel, counter_key(restaurant_id, day))
        return 0 if model is None else model.count

    def _increment(self, *, key: str, restaurant_id: str, day: str) -> int:
        upsert = _UPSERT_BY_DIALECT.get(self._engine.dialect.name)
        if upsert is None:
            raise RuntimeError(f"order counters are not supported on {self._engine.dialect.name}")

        statement = (
            upsert(OrderCounterModel)
            .values(id=key, restaurant_id=restaurant_id, day=day, count=1, updated_at=func.now())
            .on_conflict_do_update(
                index_elements=[OrderCounterModel.id],
                set_={"count": OrderCounterModel.count + 1, "updated_at": func.now()},
            )
            .returning(OrderCounterModel.count)
        )
        with Session(self._engine) as session:
            value = session.execute(statement).scalar_one()
            session.commit()
        return int(value)
