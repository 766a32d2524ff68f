from __future__ import annotations

from qrmenu.application.dto.responses import (
    CategoryResponse,
    CurrencyResponse,
    MenuItemResponse,
    MenuResponse,
    ProfileResponse,
)
from qrmenu.application.mappers.money_mapper import to_money_response
from qrmenu.domain.menu.entities import Menu
from qrmenu.domain.restaurant.entities import RestaurantProfile


def to_menu_response(menu: Menu) -> MenuResponse:
    items = [
        MenuItemResponse(
            itemId=str(item.item_id),
            name=item.name,
            description=item.description,
            priceMoney=to_money_response(item.price_money),
            isAvailable=item.is_available,
            categoryId=str(item.category_id) if item.category_id else None,
        )
        for item in menu.items
    ]
    return MenuResponse(
        menuId=str(menu.menu_id),
        restaurantId=str(menu.restaurant_id),
        menuVersion=menu.version,
        categories=[
            CategoryResponse(categoryId=str(category.category_id), name=category.name)
            for category in menu.categories
        ],
        items=items,
        updatedAt=menu.updated_at,
    )


def to_profile_response(profile: RestaurantProfile) -> ProfileResponse:
    return ProfileResponse(
        restaurantId=str(profile.restaurant_id),
        name=profile.name,
        location=profile.location,
        orderStyle=profile.order_style.value,
        currency=CurrencyResponse(code=profile.currency.code, symbol=profile.currency.symbol),
    )
