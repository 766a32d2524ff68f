from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Callable

from qrmenu.application.dto.responses import (
    MoneyResponse,
    RecentOrderResponse,
    RevenueBucketResponse,
    StatisticsResponse,
)
from qrmenu.application.mappers.money_mapper import to_money_response
from qrmenu.application.ports.repositories import OrderRepository
from qrmenu.application.use_cases.get_profile import GetRestaurantProfile
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.domain.order.lifecycle import OrderStatus
from qrmenu.domain.order.statistics import (
    MixedCurrencyError,
    StatsWindow,
    most_recent_served,
    summarize_revenue,
)

RECENT_ORDERS_LIMIT = 5


class InvalidStatisticsWindowError(Exception):
    pass


class MixedCurrencyStatisticsError(Exception):
    pass


class GetOrderStatistics:
    """Revenue report over the served orders of a restaurant.

    The window is anchored at the current instant in ``report_timezone``; hour,
    day and month buckets are computed in that timezone too. Amounts carry the
    currency the orders were placed in, not the current profile currency.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        profiles: GetRestaurantProfile,
        report_timezone: tzinfo = timezone.utc,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._order_repository = order_repository
        self._profiles = profiles
        self._report_timezone = report_timezone
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def execute(self, restaurant_id: RestaurantId, window: str = "day") -> StatisticsResponse:
        try:
            stats_window = StatsWindow(window.lower())
        except ValueError as exc:
            raise InvalidStatisticsWindowError(f"invalid statistics window: {window}") from exc

        now = self._clock().astimezone(self._report_timezone)
        served = list(
            self._order_repository.iter_for_restaurant(
                restaurant_id,
                statuses=[OrderStatus.SERVED],
            )
        )
        default_currency = self._profiles.load(restaurant_id).currency.code
        try:
            summary = summarize_revenue(
                served, stats_window, now=now, default_currency=default_currency
            )
        except MixedCurrencyError as exc:
            raise MixedCurrencyStatisticsError(str(exc)) from exc

        def money(amount_cents: int) -> MoneyResponse:
            return MoneyResponse(amountCents=amount_cents, currency=summary.currency)

        return StatisticsResponse(
            restaurantId=str(restaurant_id),
            window=summary.window.value,
            windowStart=summary.start,
            windowEnd=summary.end,
            totalRevenue=money(summary.total_revenue_cents),
            totalOrders=summary.total_orders,
            averageOrderValue=money(summary.average_order_value_cents),
            buckets=[
                RevenueBucketResponse(label=bucket.label, revenue=money(bucket.revenue_cents))
                for bucket in summary.buckets
            ],
            recentOrders=[
                RecentOrderResponse(
                    orderId=str(order.order_id),
                    orderNumber=order.order_number,
                    customerIdentifier=order.customer_identifier,
                    total=to_money_response(order.total),
                    createdAt=order.created_at,
                )
                for order in most_recent_served(served, limit=RECENT_ORDERS_LIMIT)
            ],
        )
