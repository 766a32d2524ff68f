from __future__ import annotations

from qrmenu.application.dto.responses import OrderResponse
from qrmenu.application.mappers.order_mapper import to_order_response
from qrmenu.application.ports.repositories import OrderRepository
from qrmenu.domain.common.ids import OrderId


class OrderNotFoundError(Exception):
    pass


class GetOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId) -> OrderResponse:
        found = self.find(order_id)
        if found is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return found

    def find(self, order_id: OrderId) -> OrderResponse | None:
        order = self._order_repository.get(order_id)
        if order is None:
            return None
        return to_order_response(order)
