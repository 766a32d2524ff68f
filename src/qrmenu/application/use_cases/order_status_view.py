from __future__ import annotations

import logging
from typing import Awaitable, Callable

from qrmenu.application.dto.responses import OrderResponse, OrderStatusMessage, OrderStatusResponse
from qrmenu.application.mappers.status_mapper import (
    status_error_message,
    status_message,
    to_order_status_response,
)
from qrmenu.application.ports.order_feed import OrderFeed, Subscription
from qrmenu.application.use_cases.get_order import GetOrder
from qrmenu.application.use_cases.get_profile import GetRestaurantProfile
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.restaurant.entities import RestaurantProfile

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
ORDER_LOAD_FAILED = "ORDER_LOAD_FAILED"

StatusSink = Callable[[OrderStatusMessage], Awaitable[None]]
ProfileLoader = Callable[[RestaurantId], Awaitable[RestaurantProfile]]


class GetOrderStatus:
    def __init__(self, orders: GetOrder, profiles: GetRestaurantProfile) -> None:
        self._orders = orders
        self._profiles = profiles

    def execute(self, order_id: OrderId) -> OrderStatusResponse:
        order = self._orders.execute(order_id)
        profile = self._profiles.load(RestaurantId(order.restaurantId))
        return to_order_status_response(order, profile)


class OrderStatusView:
    """Live, customer-facing rendering of one order.

    Every update pushed by the feed is rendered into a ``status`` message. A
    missing order yields a terminal ``ORDER_NOT_FOUND`` error and a failed load
    yields ``ORDER_LOAD_FAILED``; both end the subscription, so the caller has
    to open a new view to try again.
    """

    def __init__(self, feed: OrderFeed, load_profile: ProfileLoader) -> None:
        self._feed = feed
        self._load_profile = load_profile
        self._profiles: dict[str, RestaurantProfile] = {}

    def open(self, order_id: str, sink: StatusSink) -> Subscription:
        subscription: Subscription | None = None

        def _stop() -> None:
            if subscription is not None:
                subscription.cancel()

        async def on_update(order: OrderResponse | None) -> None:
            if order is None:
                _stop()
                await sink(status_error_message(ORDER_NOT_FOUND, f"order {order_id} not found"))
                return
            profile = await self._profile_for(order.restaurantId)
            await sink(status_message(to_order_status_response(order, profile)))

        async def on_error(exc: Exception) -> None:
            logger.warning(
                "order_status_load_failed",
                extra={"order_id": order_id, "error": str(exc)},
            )
            _stop()
            await sink(status_error_message(ORDER_LOAD_FAILED, "could not load order status"))

        subscription = self._feed.subscribe(order_id, on_update=on_update, on_error=on_error)
        return subscription

    async def _profile_for(self, restaurant_id: str) -> RestaurantProfile:
        profile = self._profiles.get(restaurant_id)
        if profile is None:
            profile = await self._load_profile(RestaurantId(restaurant_id))
            self._profiles[restaurant_id] = profile
        return profile
