from __future__ import annotations

from typing import Iterable, Iterator, Protocol

from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.menu.entities import Menu
from qrmenu.domain.order.entities import Order
from qrmenu.domain.order.lifecycle import OrderStatus
from qrmenu.domain.restaurant.entities import RestaurantProfile


class MenuRepository(Protocol):
    def get_menu_by_restaurant_id(self, restaurant_id: RestaurantId) -> Menu | None: ...


class ProfileRepository(Protocol):
    def get_profile(self, restaurant_id: RestaurantId) -> RestaurantProfile | None: ...


class OrderCounterRepository(Protocol):
    def next_value(self, restaurant_id: RestaurantId, day: str) -> int: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def update_status_with_version(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        expected_version: int,
    ) -> Order: ...

    def iter_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        statuses: Iterable[OrderStatus] | None = None,
    ) -> Iterator[Order]: ...


class CounterUnavailableError(Exception):
    pass


class DuplicateOrderError(Exception):
    pass


class OptimisticConcurrencyError(Exception):
    pass
