from __future__ import annotations

import concurrent.futures
import sys
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrmenu.api.main import app
from qrmenu.application.ports.repositories import OptimisticConcurrencyError
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.order.lifecycle import OrderStatus
from qrmenu.domain.order.numbering import counter_key
from qrmenu.infrastructure.db.models.counter import OrderCounterModel
from qrmenu.infrastructure.db.repositories.counter_repo import SqlAlchemyOrderCounterRepository
from qrmenu.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrmenu.infrastructure.db.session import get_engine

RESTAURANT_ID = RestaurantId("demo-bistro")
TEST_DAY = "1999-12-31"


def test_concurrent_counter_increments_are_unique_and_gapless() -> None:
    with Session(get_engine()) as session:
        session.execute(
            delete(OrderCounterModel).where(
                OrderCounterModel.id == counter_key(RESTAURANT_ID, TEST_DAY)
            )
        )
        session.commit()

    repository = SqlAlchemyOrderCounterRepository()

    def _next(_: int) -> int:
        return repository.next_value(RESTAURANT_ID, TEST_DAY)

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        values = list(executor.map(_next, range(80)))

    assert sorted(values) == list(range(1, 81))
    assert repository.current_value(RESTAURANT_ID, TEST_DAY) == 80


def test_status_update_concurrency_updates_version_once() -> None:
    with TestClient(app) as client:
        place_response = client.post(
            "/v1/restaurants/demo-bistro/orders",
            json={"customerIdentifier": "12", "items": [{"itemId": "itm_burger", "quantity": 1}]},
        )
        assert place_response.status_code == 201
        order_id = OrderId(place_response.json()["orderId"])

    repository = SqlAlchemyOrderRepository()
    order = repository.get(order_id)
    assert order is not None
    assert order.version == 1

    def _start_once() -> str:
        try:
            updated = repository.update_status_with_version(
                order_id=order_id,
                new_status=OrderStatus.ONGOING,
                expected_version=1,
            )
            return updated.status.value
        except OptimisticConcurrencyError:
            return "CONFLICT"

    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
        results = list(executor.map(lambda _: _start_once(), [0, 1]))

    assert sorted(results) == ["CONFLICT", "Ongoing"]

    current = repository.get(order_id)
    assert current is not None
    assert current.status == OrderStatus.ONGOING
    assert current.version == 2
