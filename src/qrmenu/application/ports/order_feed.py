from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from qrmenu.application.dto.responses import OrderResponse

OrderUpdateCallback = Callable[[OrderResponse | None], Awaitable[None]]
OrderErrorCallback = Callable[[Exception], Awaitable[None]]


class Subscription(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class OrderFeed(Protocol):
    def subscribe(
        self,
        order_id: str,
        on_update: OrderUpdateCallback,
        on_error: OrderErrorCallback,
    ) -> Subscription: ...
