from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.application.use_cases.list_orders import ListRestaurantOrders
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.domain.order.lifecycle import OrderStatus

START = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


def test_dashboard_partitions_orders_newest_first(order_repository, order_factory) -> None:
    statuses = [
        OrderStatus.SERVED,
        OrderStatus.RECEIVED,
        OrderStatus.CANCELED,
        OrderStatus.ON_THE_WAY,
    ]
    for index, status in enumerate(statuses):
        order = order_factory(
            f"ord_{index}",
            order_number=index + 1,
            status=status,
            created_at=START + timedelta(minutes=index),
        )
        order_repository.orders[str(order.order_id)] = order
    elsewhere = order_factory("ord_elsewhere", restaurant_id=RestaurantId("other-place"))
    order_repository.orders["ord_elsewhere"] = elsewhere

    response = ListRestaurantOrders(order_repository).execute(RestaurantId("demo-bistro"))

    assert response.pendingCount == 2
    assert [order.orderId for order in response.activeOrders] == ["ord_3", "ord_1"]
    assert [order.orderId for order in response.pastOrders] == ["ord_2", "ord_0"]


def test_dashboard_for_restaurant_without_orders(order_repository) -> None:
    response = ListRestaurantOrders(order_repository).execute(RestaurantId("demo-bistro"))

    assert response.pendingCount == 0
    assert response.activeOrders == []
    assert response.pastOrders == []


def test_pending_count_counts_only_active_orders(order_repository, order_factory) -> None:
    for order_id, status in (
        ("ord_a", OrderStatus.RECEIVED),
        ("ord_b", OrderStatus.ON_THE_WAY),
        ("ord_c", OrderStatus.SERVED),
        ("ord_d", OrderStatus.CANCELED),
    ):
        order_repository.orders[order_id] = order_factory(order_id, status=status)
    use_case = ListRestaurantOrders(order_repository)

    assert use_case.pending_count(RestaurantId("demo-bistro")) == 2

    order_repository.orders["ord_a"] = order_factory("ord_a", status=OrderStatus.SERVED)

    assert use_case.pending_count(RestaurantId("demo-bistro")) == 1
