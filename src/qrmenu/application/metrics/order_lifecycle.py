from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Gauge, Histogram

from qrmenu.domain.order.entities import Order
from qrmenu.domain.order.lifecycle import OrderStatus

ORDERS_PLACED_TOTAL = Counter(
    "qrmenu_orders_placed_total",
    "Total number of orders placed.",
    ["restaurant_id"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "qrmenu_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_TIME_TO_SERVE_SECONDS = Histogram(
    "qrmenu_order_time_to_serve_seconds",
    "Time between order placement and serving.",
)

ORDER_COUNTER_FAILURES_TOTAL = Counter(
    "qrmenu_order_counter_failures_total",
    "Total number of order placements aborted because no order number could be issued.",
    ["restaurant_id"],
)

ORDER_WRITE_CONFLICTS_TOTAL = Counter(
    "qrmenu_order_write_conflicts_total",
    "Total number of order inserts rejected for a duplicate order id.",
)

ACTIVE_ORDERS = Gauge(
    "qrmenu_active_orders",
    "Active orders seen by the last dashboard query.",
    ["restaurant_id"],
)

STATUS_SUBSCRIBERS = Gauge(
    "qrmenu_order_status_subscribers",
    "Open live order status subscriptions.",
)


def record_order_placed(order: Order) -> None:
    ORDERS_PLACED_TOTAL.labels(restaurant_id=str(order.restaurant_id)).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_time_to_serve(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_SERVE_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_counter_failure(restaurant_id: str) -> None:
    ORDER_COUNTER_FAILURES_TOTAL.labels(restaurant_id=restaurant_id).inc()


def record_write_conflict() -> None:
    ORDER_WRITE_CONFLICTS_TOTAL.inc()


def record_active_orders(restaurant_id: str, size: int) -> None:
    ACTIVE_ORDERS.labels(restaurant_id=restaurant_id).set(size)


def record_status_subscription_opened() -> None:
    STATUS_SUBSCRIBERS.inc()


def record_status_subscription_closed() -> None:
    STATUS_SUBSCRIBERS.dec()
