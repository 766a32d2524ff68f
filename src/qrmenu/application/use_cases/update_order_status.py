from __future__ import annotations

import logging
from datetime import datetime, timezone

from qrmenu.application.dto.responses import OrderResponse
from qrmenu.application.mappers.event_envelope import ORDER_STATUS_CHANGED, serialize_order_event
from qrmenu.application.mappers.order_mapper import to_order_response
from qrmenu.application.metrics.order_lifecycle import record_time_to_serve, record_transition
from qrmenu.application.ports.publisher import EventPublisher, restaurant_channel
from qrmenu.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from qrmenu.application.use_cases.context import TraceContext
from qrmenu.application.use_cases.get_order import OrderNotFoundError
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.order.entities import Order
from qrmenu.domain.order.events import OrderStatusChanged
from qrmenu.domain.order.lifecycle import OrderStatus, OrderTransitionError, TransitionMode

logger = logging.getLogger(__name__)


class InvalidOrderStatusError(Exception):
    pass


class InvalidOrderTransitionError(Exception):
    pass


class OrderConflictError(Exception):
    pass


def parse_status(value: str) -> OrderStatus:
    for status in OrderStatus:
        if status.value.lower() == value.strip().lower() or status.name == value.strip().upper():
            return status
    raise InvalidOrderStatusError(f"unknown order status: {value}")


class UpdateOrderStatus:
    """Move an order through its fulfillment pipeline on behalf of its restaurant.

    Transition rules come from ``transition_mode``; the store only guarantees
    that the write is applied against the version that was validated.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        transition_mode: TransitionMode = TransitionMode.STRICT,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._transition_mode = transition_mode

    def execute(
        self,
        restaurant_id: RestaurantId,
        order_id: OrderId,
        new_status: str,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        target = parse_status(new_status)
        order = self._load(restaurant_id, order_id)

        if order.status == target:
            return to_order_response(order)

        try:
            order.transition_to(target, self._transition_mode)
        except OrderTransitionError as exc:
            raise InvalidOrderTransitionError(str(exc)) from exc

        try:
            persisted_order = self._order_repository.update_status_with_version(
                order_id=order.order_id,
                new_status=target,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError:
            current = self._load(restaurant_id, order_id)
            if current.status == target:
                return to_order_response(current)
            raise OrderConflictError(f"order {order_id} status update conflict")

        event = OrderStatusChanged(
            order_id=persisted_order.order_id,
            restaurant_id=persisted_order.restaurant_id,
            from_status=order.status,
            to_status=target,
            occurred_at=datetime.now(timezone.utc),
        )
        record_transition(from_status=event.from_status, to_status=event.to_status)
        if target == OrderStatus.SERVED:
            record_time_to_serve(persisted_order, now=event.occurred_at)
        logger.info(
            "order_status_changed",
            extra={
                "order_id": str(event.order_id),
                "from_status": event.from_status.value,
                "to_status": event.to_status.value,
            },
        )
        self._publish(persisted_order, event, trace_ctx)
        return to_order_response(persisted_order)

    def _load(self, restaurant_id: RestaurantId, order_id: OrderId) -> Order:
        order = self._order_repository.get(order_id)
        if order is None or order.restaurant_id != restaurant_id:
            raise OrderNotFoundError(f"order {order_id} not found")
        return order

    def _publish(self, order: Order, event: OrderStatusChanged, trace_ctx: TraceContext) -> None:
        message = serialize_order_event(
            event_type=ORDER_STATUS_CHANGED,
            occurred_at=event.occurred_at,
            order=order,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
            from_status=event.from_status,
        )
        try:
            self._publisher.publish(
                channel=restaurant_channel(str(order.restaurant_id)),
                message=message,
            )
        except Exception:
            logger.exception("order_event_publish_failed", extra={"order_id": str(order.order_id)})
