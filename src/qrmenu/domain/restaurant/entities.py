from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from qrmenu.domain.common.ids import RestaurantId
from qrmenu.domain.restaurant.currencies import DEFAULT_CURRENCY, Currency


class OrderStyle(str, Enum):
    TABLE = "table"
    NAME = "name"


@dataclass(frozen=True)
class RestaurantProfile:
    restaurant_id: RestaurantId
    name: str = ""
    location: str = ""
    order_style: OrderStyle = OrderStyle.TABLE
    currency: Currency = field(default=DEFAULT_CURRENCY)

    def customer_label(self, customer_identifier: str) -> str:
        if self.order_style == OrderStyle.TABLE:
            return f"Table #{customer_identifier}"
        return customer_identifier


def default_profile(restaurant_id: RestaurantId) -> RestaurantProfile:
    return RestaurantProfile(restaurant_id=restaurant_id)
