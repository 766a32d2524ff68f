from __future__ import annotations

from fastapi import APIRouter, status
from opentelemetry import trace

from qrmenu.api.middleware.request_id import get_request_id
from qrmenu.application.dto.requests import PlaceOrderRequest
from qrmenu.application.dto.responses import OrderResponse, OrderStatusResponse
from qrmenu.application.use_cases.context import TraceContext
from qrmenu.application.use_cases.get_order import GetOrder
from qrmenu.application.use_cases.get_profile import GetRestaurantProfile
from qrmenu.application.use_cases.order_status_view import GetOrderStatus
from qrmenu.application.use_cases.place_order import PlaceOrder
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.infrastructure.db.repositories.counter_repo import SqlAlchemyOrderCounterRepository
from qrmenu.infrastructure.db.repositories.menu_repo import (
    SqlAlchemyMenuRepository,
    SqlAlchemyProfileRepository,
)
from qrmenu.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrmenu.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter(tags=["orders"])


def _current_trace_id() -> str | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def _place_order_use_case() -> PlaceOrder:
    return PlaceOrder(
        menu_repository=SqlAlchemyMenuRepository(),
        counter_repository=SqlAlchemyOrderCounterRepository(),
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )


def _get_order_use_case() -> GetOrder:
    return GetOrder(order_repository=SqlAlchemyOrderRepository())


def _get_order_status_use_case() -> GetOrderStatus:
    return GetOrderStatus(
        orders=_get_order_use_case(),
        profiles=GetRestaurantProfile(repository=SqlAlchemyProfileRepository()),
    )


@router.post(
    "/v1/restaurants/{restaurant_id}/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
def place_order(restaurant_id: str, request_dto: PlaceOrderRequest) -> OrderResponse:
    return _place_order_use_case().execute(
        restaurant_id=RestaurantId(restaurant_id),
        request_dto=request_dto,
        trace_ctx=TraceContext(trace_id=_current_trace_id(), request_id=get_request_id()),
    )


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return _get_order_use_case().execute(order_id=OrderId(order_id))


@router.get("/v1/orders/{order_id}/status", response_model=OrderStatusResponse)
def get_order_status(order_id: str) -> OrderStatusResponse:
    return _get_order_status_use_case().execute(order_id=OrderId(order_id))
