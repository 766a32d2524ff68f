from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from qrmenu.domain.common.ids import CategoryId, MenuId, MenuItemId, RestaurantId
from qrmenu.domain.common.money import Money


@dataclass(frozen=True)
class Category:
    category_id: CategoryId
    name: str


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    description: str | None
    price_money: Money
    is_available: bool
    category_id: CategoryId | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")


@dataclass(frozen=True)
class Menu:
    menu_id: MenuId
    restaurant_id: RestaurantId
    version: int
    categories: list[Category] = field(default_factory=list)
    items: list[MenuItem] = field(default_factory=list)
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.version < 1:
            raise ValueError("version must be >= 1")

    def find_item(self, item_id: str) -> MenuItem | None:
        for item in self.items:
            if str(item.item_id) == item_id:
                return item
        return None
