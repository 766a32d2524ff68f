from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from qrmenu.application.dto.requests import PlaceOrderItemRequest, PlaceOrderRequest
from qrmenu.application.dto.responses import OrderResponse
from qrmenu.application.mappers.event_envelope import ORDER_PLACED, serialize_order_event
from qrmenu.application.mappers.order_mapper import to_order_response
from qrmenu.application.metrics.order_lifecycle import (
    record_counter_failure,
    record_order_placed,
    record_write_conflict,
)
from qrmenu.application.ports.publisher import EventPublisher, restaurant_channel
from qrmenu.application.ports.repositories import (
    CounterUnavailableError as RepoCounterUnavailableError,
)
from qrmenu.application.ports.repositories import (
    DuplicateOrderError,
    MenuRepository,
    OrderCounterRepository,
    OrderRepository,
)
from qrmenu.application.use_cases.context import TraceContext
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.menu.entities import Menu
from qrmenu.domain.order.entities import Order, OrderItem, create_received_order, snapshot_item
from qrmenu.domain.order.events import OrderPlaced
from qrmenu.domain.order.numbering import day_bucket

logger = logging.getLogger(__name__)

MAX_ORDER_ID_ATTEMPTS = 3


class MenuNotFoundError(Exception):
    pass


class MenuItemUnavailableError(Exception):
    pass


class InvalidOrderError(Exception):
    pass


class CounterUnavailableError(Exception):
    pass


class OrderWriteConflictError(Exception):
    pass


def new_order_id() -> OrderId:
    return OrderId(f"ord_{uuid4().hex}")


class PlaceOrder:
    def __init__(
        self,
        menu_repository: MenuRepository,
        counter_repository: OrderCounterRepository,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], OrderId] = new_order_id,
    ) -> None:
        self._menu_repository = menu_repository
        self._counter_repository = counter_repository
        self._order_repository = order_repository
        self._publisher = publisher
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory

    def execute(
        self,
        restaurant_id: RestaurantId,
        request_dto: PlaceOrderRequest,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        customer_identifier = request_dto.customer_identifier.strip()
        if not customer_identifier:
            raise InvalidOrderError("customer identifier is required")

        menu = self._menu_repository.get_menu_by_restaurant_id(restaurant_id)
        if menu is None:
            raise MenuNotFoundError(f"menu not found for restaurant_id={restaurant_id}")

        items = _snapshot_items(menu, request_dto.items)

        # The number must be issued before anything is written.
        now = self._clock()
        day = day_bucket(now)
        try:
            order_number = self._counter_repository.next_value(restaurant_id, day)
        except RepoCounterUnavailableError as exc:
            record_counter_failure(str(restaurant_id))
            logger.warning(
                "order_counter_unavailable",
                extra={"restaurant_id": str(restaurant_id), "day": day},
            )
            raise CounterUnavailableError(
                f"could not issue an order number for restaurant_id={restaurant_id}"
            ) from exc

        order = self._persist(
            restaurant_id=restaurant_id,
            order_number=order_number,
            customer_identifier=customer_identifier,
            items=items,
            now=now,
        )
        logger.info(
            "order_placed",
            extra={
                "restaurant_id": str(restaurant_id),
                "order_id": str(order.order_id),
                "order_number": order.order_number,
            },
        )
        record_order_placed(order)
        self._publish_placed(order, trace_ctx)
        return to_order_response(order)

    def _persist(
        self,
        *,
        restaurant_id: RestaurantId,
        order_number: int,
        customer_identifier: str,
        items: list[OrderItem],
        now: datetime,
    ) -> Order:
        for attempt in range(1, MAX_ORDER_ID_ATTEMPTS + 1):
            order = create_received_order(
                order_id=self._id_factory(),
                restaurant_id=restaurant_id,
                order_number=order_number,
                customer_identifier=customer_identifier,
                items=items,
                now=now,
            )
            try:
                self._order_repository.add(order)
                return order
            except DuplicateOrderError:
                record_write_conflict()
                logger.warning(
                    "order_id_conflict",
                    extra={"order_id": str(order.order_id), "attempt": attempt},
                )

        raise OrderWriteConflictError(
            f"could not store order number {order_number} for restaurant_id={restaurant_id}"
        )

    def _publish_placed(self, order: Order, trace_ctx: TraceContext) -> None:
        event = OrderPlaced(
            order_id=order.order_id,
            restaurant_id=order.restaurant_id,
            order_number=order.order_number,
            total=order.total,
            created_at=order.created_at,
        )
        message = serialize_order_event(
            event_type=ORDER_PLACED,
            occurred_at=event.created_at,
            order=order,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        try:
            self._publisher.publish(
                channel=restaurant_channel(str(event.restaurant_id)),
                message=message,
            )
        except Exception:
            logger.exception("order_event_publish_failed", extra={"order_id": str(order.order_id)})


def _snapshot_items(menu: Menu, requested: list[PlaceOrderItemRequest]) -> list[OrderItem]:
    quantities: dict[str, int] = {}
    for request_item in requested:
        if request_item.quantity < 1:
            raise InvalidOrderError("quantity must be >= 1")
        previous = quantities.get(request_item.item_id, 0)
        quantities[request_item.item_id] = previous + request_item.quantity

    items: list[OrderItem] = []
    for item_id, quantity in quantities.items():
        menu_item = menu.find_item(item_id)
        if menu_item is None:
            raise MenuItemUnavailableError(f"menu item {item_id} does not exist")
        if not menu_item.is_available:
            raise MenuItemUnavailableError(f"menu item {item_id} is unavailable")
        items.append(
            snapshot_item(
                item_id=menu_item.item_id,
                name=menu_item.name,
                unit_price=menu_item.price_money,
                quantity=quantity,
            )
        )

    currencies = {item.unit_price.currency for item in items}
    if len(currencies) > 1:
        raise InvalidOrderError("menu items in one order must share a currency")
    return items
