from __future__ import annotations

from qrmenu.application.dto.responses import RestaurantOrdersResponse
from qrmenu.application.mappers.order_mapper import to_order_response
from qrmenu.application.metrics.order_lifecycle import record_active_orders
from qrmenu.application.ports.repositories import OrderRepository
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.domain.order.lifecycle import TERMINAL_STATUSES, OrderPhase, OrderStatus

ACTIVE_STATUSES = tuple(status for status in OrderStatus if status not in TERMINAL_STATUSES)


class ListRestaurantOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, restaurant_id: RestaurantId) -> RestaurantOrdersResponse:
        orders = sorted(
            self._order_repository.iter_for_restaurant(restaurant_id),
            key=lambda order: order.created_at,
            reverse=True,
        )
        active = [order for order in orders if order.phase == OrderPhase.ACTIVE]
        past = [order for order in orders if order.phase == OrderPhase.PAST]

        record_active_orders(restaurant_id=str(restaurant_id), size=len(active))

        return RestaurantOrdersResponse(
            restaurantId=str(restaurant_id),
            pendingCount=len(active),
            activeOrders=[to_order_response(order) for order in active],
            pastOrders=[to_order_response(order) for order in past],
        )

    def pending_count(self, restaurant_id: RestaurantId) -> int:
        """Number of active orders, the figure behind the dashboard badge."""
        count = sum(
            1
            for _ in self._order_repository.iter_for_restaurant(
                restaurant_id,
                statuses=ACTIVE_STATUSES,
            )
        )
        record_active_orders(restaurant_id=str(restaurant_id), size=count)
        return count
