from __future__ import annotations

import logging
import os
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, Query
from opentelemetry import trace

from qrmenu.api.middleware.request_id import get_request_id
from qrmenu.api.security import require_owner
from qrmenu.application.dto.requests import UpdateOrderStatusRequest
from qrmenu.application.dto.responses import (
    OrderResponse,
    RestaurantOrdersResponse,
    StatisticsResponse,
)
from qrmenu.application.use_cases.context import TraceContext
from qrmenu.application.use_cases.get_profile import GetRestaurantProfile
from qrmenu.application.use_cases.list_orders import ListRestaurantOrders
from qrmenu.application.use_cases.order_statistics import GetOrderStatistics
from qrmenu.application.use_cases.update_order_status import UpdateOrderStatus
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.order.lifecycle import TransitionMode
from qrmenu.infrastructure.db.repositories.menu_repo import SqlAlchemyProfileRepository
from qrmenu.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrmenu.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter(tags=["owner"])
logger = logging.getLogger(__name__)


def _current_trace_id() -> str | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def _transition_mode() -> TransitionMode:
    raw_value = os.getenv("ORDER_TRANSITION_MODE", TransitionMode.STRICT.value)
    try:
        return TransitionMode(raw_value.strip().lower())
    except ValueError:
        logger.warning("invalid_transition_mode", extra={"value": raw_value})
        return TransitionMode.STRICT


def _stats_timezone() -> tzinfo:
    name = os.getenv("STATS_TIMEZONE", "UTC").strip()
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("invalid_stats_timezone", extra={"value": name})
        return timezone.utc


def _list_orders_use_case() -> ListRestaurantOrders:
    return ListRestaurantOrders(order_repository=SqlAlchemyOrderRepository())


def _update_order_status_use_case() -> UpdateOrderStatus:
    return UpdateOrderStatus(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
        transition_mode=_transition_mode(),
    )


def _order_statistics_use_case() -> GetOrderStatistics:
    return GetOrderStatistics(
        order_repository=SqlAlchemyOrderRepository(),
        profiles=GetRestaurantProfile(repository=SqlAlchemyProfileRepository()),
        report_timezone=_stats_timezone(),
    )


@router.get("/v1/restaurants/{restaurant_id}/orders", response_model=RestaurantOrdersResponse)
def list_orders(restaurant_id: str = Depends(require_owner)) -> RestaurantOrdersResponse:
    return _list_orders_use_case().execute(RestaurantId(restaurant_id))


@router.patch(
    "/v1/restaurants/{restaurant_id}/orders/{order_id}/status",
    response_model=OrderResponse,
)
def update_order_status(
    order_id: str,
    request_dto: UpdateOrderStatusRequest,
    restaurant_id: str = Depends(require_owner),
) -> OrderResponse:
    return _update_order_status_use_case().execute(
        restaurant_id=RestaurantId(restaurant_id),
        order_id=OrderId(order_id),
        new_status=request_dto.status,
        trace_ctx=TraceContext(trace_id=_current_trace_id(), request_id=get_request_id()),
    )


@router.get("/v1/restaurants/{restaurant_id}/statistics", response_model=StatisticsResponse)
def order_statistics(
    restaurant_id: str = Depends(require_owner),
    window: str = Query(default="day"),
) -> StatisticsResponse:
    return _order_statistics_use_case().execute(RestaurantId(restaurant_id), window=window)
