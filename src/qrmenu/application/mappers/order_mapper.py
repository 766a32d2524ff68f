from __future__ import annotations

from qrmenu.application.dto.responses import OrderItemResponse, OrderResponse
from qrmenu.application.mappers.money_mapper import to_money_response
from qrmenu.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        restaurantId=str(order.restaurant_id),
        orderNumber=order.order_number,
        customerIdentifier=order.customer_identifier,
        status=order.status.value,
        phase=order.phase.value,
        items=[
            OrderItemResponse(
                itemId=str(item.item_id),
                name=item.name,
                quantity=item.quantity,
                unitPrice=to_money_response(item.unit_price),
                lineTotal=to_money_response(item.line_total),
            )
            for item in order.items
        ],
        total=to_money_response(order.total),
        createdAt=order.created_at,
        version=order.version,
    )
