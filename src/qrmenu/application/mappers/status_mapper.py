from __future__ import annotations

from qrmenu.application.dto.responses import (
    OrderResponse,
    OrderStatusItemResponse,
    OrderStatusMessage,
    OrderStatusResponse,
    StatusErrorResponse,
)
from qrmenu.domain.order.lifecycle import (
    PROGRESS_TOTAL_STEPS,
    OrderStatus,
    progress_percentage,
    status_display,
)
from qrmenu.domain.restaurant.currencies import symbol_for
from qrmenu.domain.restaurant.entities import RestaurantProfile


def to_order_status_response(
    order: OrderResponse,
    profile: RestaurantProfile,
) -> OrderStatusResponse:
    status = OrderStatus(order.status)
    display = status_display(status)
    return OrderStatusResponse(
        orderId=order.orderId,
        orderNumber=order.orderNumber,
        status=status.value,
        label=display.label,
        icon=display.icon,
        message=display.message,
        step=display.step,
        totalSteps=PROGRESS_TOTAL_STEPS,
        progressPercentage=progress_percentage(status),
        isCanceled=status == OrderStatus.CANCELED,
        isServed=status == OrderStatus.SERVED,
        customerLabel=profile.customer_label(order.customerIdentifier),
        currencySymbol=symbol_for(order.total.currency),
        items=[
            OrderStatusItemResponse(
                name=item.name,
                quantity=item.quantity,
                lineTotal=item.lineTotal,
            )
            for item in order.items
        ],
        total=order.total,
        createdAt=order.createdAt,
    )


def status_message(status: OrderStatusResponse) -> OrderStatusMessage:
    return OrderStatusMessage(type="status", status=status)


def status_error_message(code: str, message: str) -> OrderStatusMessage:
    return OrderStatusMessage(type="error", error=StatusErrorResponse(code=code, message=message))
