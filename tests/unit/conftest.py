from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Iterator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrmenu.application.ports.repositories import (
    CounterUnavailableError,
    DuplicateOrderError,
    OptimisticConcurrencyError,
)
from qrmenu.domain.common.ids import CategoryId, MenuId, MenuItemId, OrderId, RestaurantId
from qrmenu.domain.common.money import Money
from qrmenu.domain.menu.entities import Category, Menu, MenuItem
from qrmenu.domain.order.entities import Order, snapshot_item
from qrmenu.domain.order.lifecycle import OrderStatus
from qrmenu.domain.restaurant.entities import RestaurantProfile

RESTAURANT_ID = RestaurantId("demo-bistro")


class FakeMenuRepository:
    def __init__(self, menu: Menu | None) -> None:
        self.menu = menu
        self.calls = 0

    def get_menu_by_restaurant_id(self, restaurant_id: RestaurantId) -> Menu | None:
        self.calls += 1
        return self.menu


class FakeProfileRepository:
    def __init__(self, profile: RestaurantProfile | None = None, fail: bool = False) -> None:
        self.profile = profile
        self.fail = fail

    def get_profile(self, restaurant_id: RestaurantId) -> RestaurantProfile | None:
        if self.fail:
            raise RuntimeError("profile store offline")
        return self.profile


class FakeCounterRepository:
    def __init__(self) -> None:
        self.counts: dict[tuple[str, str], int] = {}
        self.fail = False

    def next_value(self, restaurant_id: RestaurantId, day: str) -> int:
        if self.fail:
            raise CounterUnavailableError("counter offline")
        key = (str(restaurant_id), day)
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]


class FakeOrderRepository:
    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}
        self.duplicate_ids: set[str] = set()
        self.add_calls = 0
        self.stale_writes = 0

    def add(self, order: Order) -> None:
        self.add_calls += 1
        if str(order.order_id) in self.duplicate_ids or str(order.order_id) in self.orders:
            raise DuplicateOrderError(f"order {order.order_id} already exists")
        self.orders[str(order.order_id)] = order

    def get(self, order_id) -> Order | None:
        return self.orders.get(str(order_id))

    def update_status_with_version(
        self,
        order_id,
        new_status: OrderStatus,
        expected_version: int,
    ) -> Order:
        if self.stale_writes:
            self.stale_writes -= 1
            raise OptimisticConcurrencyError(f"order {order_id} version conflict")
        current = self.orders[str(order_id)]
        if current.version != expected_version:
            raise OptimisticConcurrencyError(f"order {order_id} version conflict")
        updated = replace(current, status=new_status, version=current.version + 1)
        self.orders[str(order_id)] = updated
        return updated

    def iter_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        statuses: Iterable[OrderStatus] | None = None,
    ) -> Iterator[Order]:
        wanted = set(statuses) if statuses is not None else None
        for order in list(self.orders.values()):
            if order.restaurant_id != restaurant_id:
                continue
            if wanted is not None and order.status not in wanted:
                continue
            yield order


class FakePublisher:
    def __init__(self, fail: bool = False) -> None:
        self.messages: list[tuple[str, str]] = []
        self.fail = fail

    def publish(self, channel: str, message: str) -> None:
        if self.fail:
            raise ConnectionError("redis offline")
        self.messages.append((channel, message))


def sample_menu(restaurant_id: RestaurantId = RESTAURANT_ID, version: int = 1) -> Menu:
    return Menu(
        menu_id=MenuId("men_demo_001"),
        restaurant_id=restaurant_id,
        version=version,
        categories=[Category(category_id=CategoryId("cat_mains"), name="Mains")],
        items=[
            MenuItem(
                item_id=MenuItemId("itm_burger"),
                name="Classic Burger",
                description="Beef patty, cheddar, pickles",
                price_money=Money(amount_cents=899, currency="USD"),
                is_available=True,
                category_id=CategoryId("cat_mains"),
            ),
            MenuItem(
                item_id=MenuItemId("itm_risotto"),
                name="Mushroom Risotto",
                description=None,
                price_money=Money(amount_cents=1550, currency="USD"),
                is_available=True,
                category_id=CategoryId("cat_mains"),
            ),
            MenuItem(
                item_id=MenuItemId("itm_cheesecake"),
                name="Cheesecake",
                description=None,
                price_money=Money(amount_cents=700, currency="USD"),
                is_available=False,
            ),
        ],
        updated_at=datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc),
    )


def make_order(
    order_id: str = "ord_001",
    *,
    restaurant_id: RestaurantId = RESTAURANT_ID,
    order_number: int = 1,
    customer_identifier: str = "7",
    status: OrderStatus = OrderStatus.RECEIVED,
    created_at: datetime | None = None,
    amount_cents: int = 899,
    quantity: int = 1,
    version: int = 1,
    currency: str = "USD",
) -> Order:
    item = snapshot_item(
        item_id=MenuItemId("itm_burger"),
        name="Classic Burger",
        unit_price=Money(amount_cents=amount_cents, currency=currency),
        quantity=quantity,
    )
    return Order(
        order_id=OrderId(order_id),
        restaurant_id=restaurant_id,
        order_number=order_number,
        customer_identifier=customer_identifier,
        status=status,
        items=(item,),
        total=item.line_total,
        created_at=created_at or datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
        version=version,
    )


@pytest.fixture
def menu_repository() -> FakeMenuRepository:
    return FakeMenuRepository(sample_menu())


@pytest.fixture
def counter_repository() -> FakeCounterRepository:
    return FakeCounterRepository()


@pytest.fixture
def order_repository() -> FakeOrderRepository:
    return FakeOrderRepository()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def order_factory() -> Callable[..., Order]:
    return make_order


@pytest.fixture
def menu_factory() -> Callable[..., Menu]:
    return sample_menu


@pytest.fixture
def profile_repository_factory() -> type[FakeProfileRepository]:
    return FakeProfileRepository


@pytest.fixture
def menu_repository_factory() -> type[FakeMenuRepository]:
    return FakeMenuRepository


@pytest.fixture
def publisher_factory() -> type[FakePublisher]:
    return FakePublisher
