from __future__ import annotations

from datetime import timezone
from typing import Iterable, Iterator

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from qrmenu.application.ports.repositories import (
    DuplicateOrderError,
    OptimisticConcurrencyError,
    OrderRepository,
)
from qrmenu.domain.common.ids import MenuItemId, OrderId, RestaurantId
from qrmenu.domain.common.money import Money
from qrmenu.domain.order.entities import Order, OrderItem
from qrmenu.domain.order.lifecycle import OrderStatus
from qrmenu.domain.order.numbering import day_bucket
from qrmenu.infrastructure.db.models.order import OrderItemModel, OrderModel
from qrmenu.infrastructure.db.session import get_engine

_BATCH_SIZE = 200


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, order: Order) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(order))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                if session.get(OrderModel, str(order.order_id)) is not None:
                    raise DuplicateOrderError(f"order {order.order_id} already exists") from None
                raise

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def update_status_with_version(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        expected_version: int,
    ) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order_id),
                OrderModel.version == expected_version,
            )
            .values(
                status=new_status.value,
                version=OrderModel.version + 1,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order_id} version conflict")
            session.commit()

        updated = self.get(order_id)
        if updated is None:
            raise RuntimeError(f"order {order_id} not found after status update")
        return updated

    def iter_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        statuses: Iterable[OrderStatus] | None = None,
    ) -> Iterator[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.restaurant_id == str(restaurant_id))
        )
        if statuses is not None:
            status_values = [status.value for status in statuses]
            statement = statement.where(OrderModel.status.in_(status_values))

        with Session(self._engine) as session:
            result = session.scalars(statement.execution_options(yield_per=_BATCH_SIZE))
            for model in result:
                yield self._to_domain(model)

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            restaurant_id=str(order.restaurant_id),
            order_number=order.order_number,
            order_day=day_bucket(order.created_at),
            customer_identifier=order.customer_identifier,
            status=order.status.value,
            version=order.version,
            created_at=order.created_at,
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
        )
        order_model.items = [
            OrderItemModel(
                order_id=str(order.order_id),
                position=position,
                item_id=str(item.item_id),
                name=item.name,
                quantity=item.quantity,
                unit_price_cents=item.unit_price.amount_cents,
                currency=item.unit_price.currency,
                line_total_cents=item.line_total.amount_cents,
            )
            for position, item in enumerate(order.items)
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        created_at = model.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        items = tuple(
            OrderItem(
                item_id=MenuItemId(item.item_id),
                name=item.name,
                quantity=item.quantity,
                unit_price=Money(amount_cents=item.unit_price_cents, currency=item.currency),
                line_total=Money(amount_cents=item.line_total_cents, currency=item.currency),
            )
            for item in model.items
        )
        return Order(
            order_id=OrderId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            order_number=model.order_number,
            customer_identifier=model.customer_identifier,
            status=OrderStatus(model.status),
            items=items,
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            created_at=created_at,
            version=model.version,
        )
