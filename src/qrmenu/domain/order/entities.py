from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from qrmenu.domain.common.ids import MenuItemId, OrderId, RestaurantId
from qrmenu.domain.common.money import Money
from qrmenu.domain.order.lifecycle import (
    OrderPhase,
    OrderStatus,
    TransitionMode,
    classify,
    ensure_transition,
)


@dataclass(frozen=True)
class OrderItem:
    item_id: MenuItemId
    name: str
    quantity: int
    unit_price: Money
    line_total: Money

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price.currency != self.line_total.currency:
            raise ValueError("line_total currency must match unit_price currency")
        expected_total = self.unit_price.amount_cents * self.quantity
        if self.line_total.amount_cents != expected_total:
            raise ValueError("line_total must equal unit_price * quantity")


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    restaurant_id: RestaurantId
    order_number: int
    customer_identifier: str
    status: OrderStatus
    items: tuple[OrderItem, ...]
    total: Money
    created_at: datetime
    version: int = 1

    def __post_init__(self) -> None:
        if self.order_number < 1:
            raise ValueError("order_number must be >= 1")
        if not self.customer_identifier.strip():
            raise ValueError("customer_identifier must be non-empty")
        if not self.items:
            raise ValueError("order must contain at least one item")
        if self.version < 1:
            raise ValueError("version must be >= 1")
        item_currency = self.items[0].line_total.currency
        if any(item.line_total.currency != item_currency for item in self.items):
            raise ValueError("order items must share one currency")
        if self.total.currency != item_currency:
            raise ValueError("order total currency must match item currency")
        expected_total = sum(item.line_total.amount_cents for item in self.items)
        if self.total.amount_cents != expected_total:
            raise ValueError("order total must equal sum of item line totals")

    @property
    def phase(self) -> OrderPhase:
        return classify(self.status)

    def transition_to(
        self,
        status: OrderStatus,
        mode: TransitionMode = TransitionMode.STRICT,
    ) -> Order:
        ensure_transition(self.status, status, mode)
        return replace(self, status=status)


def snapshot_item(
    item_id: MenuItemId,
    name: str,
    unit_price: Money,
    quantity: int,
) -> OrderItem:
    return OrderItem(
        item_id=item_id,
        name=name,
        quantity=quantity,
        unit_price=unit_price,
        line_total=unit_price.times(quantity),
    )


def create_received_order(
    order_id: OrderId,
    restaurant_id: RestaurantId,
    order_number: int,
    customer_identifier: str,
    items: list[OrderItem],
    now: datetime,
) -> Order:
    if not items:
        raise ValueError("order must contain at least one item")

    currency = items[0].line_total.currency
    total = Money(
        amount_cents=sum(item.line_total.amount_cents for item in items),
        currency=currency,
    )
    return Order(
        order_id=order_id,
        restaurant_id=restaurant_id,
        order_number=order_number,
        customer_identifier=customer_identifier.strip(),
        status=OrderStatus.RECEIVED,
        items=tuple(items),
        total=total,
        created_at=now,
    )
