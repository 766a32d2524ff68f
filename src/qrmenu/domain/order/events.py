from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.common.money import Money
from qrmenu.domain.order.lifecycle import OrderStatus


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    restaurant_id: RestaurantId
    order_number: int
    total: Money
    created_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    restaurant_id: RestaurantId
    from_status: OrderStatus
    to_status: OrderStatus
    occurred_at: datetime
