from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from qrmenu.application.mappers.order_mapper import to_order_response
from qrmenu.domain.order.entities import Order
from qrmenu.domain.order.lifecycle import OrderStatus

ORDER_PLACED = "order.placed"
ORDER_STATUS_CHANGED = "order.status_changed"
ORDER_EVENT_PREFIX = "order."
DASHBOARD_PENDING_COUNT = "dashboard.pending_count"


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    restaurant_id: str,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "restaurant_id": restaurant_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_order_event(
    *,
    event_type: str,
    occurred_at: datetime,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
    from_status: OrderStatus | None = None,
) -> str:
    payload = to_order_response(order).model_dump(mode="json")
    if from_status is not None:
        payload["fromStatus"] = from_status.value
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        restaurant_id=str(order.restaurant_id),
        trace_id=trace_id,
        request_id=request_id,
        payload=payload,
    )


def serialize_pending_count(
    *,
    restaurant_id: str,
    pending_count: int,
    occurred_at: datetime,
) -> str:
    return _serialize_event(
        event_type=DASHBOARD_PENDING_COUNT,
        occurred_at=occurred_at,
        restaurant_id=restaurant_id,
        trace_id=None,
        request_id=None,
        payload={"pendingCount": pending_count},
    )
