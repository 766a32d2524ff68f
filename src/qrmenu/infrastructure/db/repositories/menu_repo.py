from __future__ import annotations

from datetime import timezone

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from qrmenu.application.ports.repositories import MenuRepository, ProfileRepository
from qrmenu.domain.common.ids import CategoryId, MenuId, MenuItemId, RestaurantId
from qrmenu.domain.common.money import Money
from qrmenu.domain.menu.entities import Category, Menu, MenuItem
from qrmenu.domain.restaurant.currencies import currency_for
from qrmenu.domain.restaurant.entities import OrderStyle, RestaurantProfile
from qrmenu.infrastructure.db.models.menu import MenuModel, RestaurantModel
from qrmenu.infrastructure.db.session import get_engine


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get_menu_by_restaurant_id(self, restaurant_id: RestaurantId) -> Menu | None:
        statement = (
            select(MenuModel)
            .options(selectinload(MenuModel.items), selectinload(MenuModel.categories))
            .where(MenuModel.restaurant_id == str(restaurant_id))
            .order_by(MenuModel.version.desc())
            .limit(1)
        )

        with Session(self._engine) as session:
            menu_model = session.execute(statement).scalar_one_or_none()
            if menu_model is None:
                return None
            return _to_menu(menu_model)


class SqlAlchemyProfileRepository(ProfileRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get_profile(self, restaurant_id: RestaurantId) -> RestaurantProfile | None:
        with Session(self._engine) as session:
            model = session.get(RestaurantModel, str(restaurant_id))
            if model is None:
                return None
            try:
                order_style = OrderStyle(model.order_style)
            except ValueError:
                order_style = OrderStyle.TABLE
            return RestaurantProfile(
                restaurant_id=RestaurantId(model.id),
                name=model.name,
                location=model.location,
                order_style=order_style,
                currency=currency_for(model.currency_code),
            )


def _to_menu(menu_model: MenuModel) -> Menu:
    updated_at = menu_model.updated_at
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=timezone.utc)

    items = [
        MenuItem(
            item_id=MenuItemId(item.id),
            name=item.name,
            description=item.description,
            price_money=Money(amount_cents=item.price_cents, currency=item.currency),
            is_available=item.is_available,
            category_id=CategoryId(item.category_id) if item.category_id else None,
        )
        for item in menu_model.items
    ]
    categories = [
        Category(category_id=CategoryId(category.id), name=category.name)
        for category in menu_model.categories
    ]

    return Menu(
        menu_id=MenuId(menu_model.id),
        restaurant_id=RestaurantId(menu_model.restaurant_id),
        version=menu_model.version,
        categories=categories,
        items=items,
        updated_at=updated_at,
    )
