from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.application.ports.repositories import CounterUnavailableError
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.infrastructure.db.repositories.counter_repo import SqlAlchemyOrderCounterRepository

RESTAURANT_ID = RestaurantId("demo-bistro")
DAY = "2026-10-01"


def test_new_bucket_starts_at_one(engine) -> None:
    repository = SqlAlchemyOrderCounterRepository(engine=engine)

    assert repository.current_value(RESTAURANT_ID, DAY) == 0
    assert repository.next_value(RESTAURANT_ID, DAY) == 1
    assert repository.current_value(RESTAURANT_ID, DAY) == 1


def test_sequential_calls_are_contiguous(engine) -> None:
    repository = SqlAlchemyOrderCounterRepository(engine=engine)

    values = [repository.next_value(RESTAURANT_ID, DAY) for _ in range(3)]

    assert values == [1, 2, 3]


def test_buckets_are_independent(engine) -> None:
    repository = SqlAlchemyOrderCounterRepository(engine=engine)
    repository.next_value(RESTAURANT_ID, DAY)
    repository.next_value(RESTAURANT_ID, DAY)

    assert repository.next_value(RESTAURANT_ID, "2026-10-02") == 1
    assert repository.next_value(RestaurantId("other-place"), DAY) == 1
    assert repository.current_value(RESTAURANT_ID, DAY) == 2


def test_concurrent_calls_get_distinct_contiguous_values(engine) -> None:
    repository = SqlAlchemyOrderCounterRepository(engine=engine)

    with ThreadPoolExecutor(max_workers=4) as pool:
        values = list(pool.map(lambda _: repository.next_value(RESTAURANT_ID, DAY), range(20)))

    assert sorted(values) == list(range(1, 21))


def test_transient_failures_are_retried(engine, monkeypatch) -> None:
    repository = SqlAlchemyOrderCounterRepository(engine=engine)
    original = repository._increment
    failures = iter([True, True, False])

    def flaky(**kwargs):
        if next(failures):
            raise OperationalError("INSERT", {}, Exception("deadlock detected"))
        return original(**kwargs)

    monkeypatch.setattr(repository, "_increment", flaky)

    assert repository.next_value(RESTAURANT_ID, DAY) == 1


def test_persistent_failure_raises_counter_unavailable(engine, monkeypatch) -> None:
    repository = SqlAlchemyOrderCounterRepository(engine=engine, max_attempts=3)
    attempts = []

    def broken(**kwargs):
        attempts.append(kwargs["key"])
        raise OperationalError("INSERT", {}, Exception("connection lost"))

    monkeypatch.setattr(repository, "_increment", broken)

    with pytest.raises(CounterUnavailableError):
        repository.next_value(RESTAURANT_ID, DAY)

    assert attempts == ["demo-bistro_2026-10-01"] * 3
    monkeypatch.undo()
    assert repository.current_value(RESTAURANT_ID, DAY) == 0
