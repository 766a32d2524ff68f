from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from qrmenu.infrastructure.db.models.menu import (
    MenuCategoryModel,
    MenuItemModel,
    MenuModel,
    RestaurantModel,
)
from qrmenu.infrastructure.db.session import get_engine
from qrmenu.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger("qrmenu.tools.seed")

RESTAURANT_ID = "demo-bistro"
MENU_ID = "men_demo_001"

RESTAURANT = {
    "id": RESTAURANT_ID,
    "name": "Demo Bistro",
    "location": "12 Harbour Street",
    "order_style": "table",
    "currency_code": "USD",
}

CATEGORIES = [
    {"id": "cat_mains", "name": "Mains", "position": 0},
    {"id": "cat_sides", "name": "Sides", "position": 1},
    {"id": "cat_desserts", "name": "Desserts", "position": 2},
]

ITEMS = [
    {
        "id": "itm_burger",
        "category_id": "cat_mains",
        "name": "Classic Burger",
        "description": "Beef patty, cheddar, pickles",
        "price_cents": 899,
        "is_available": True,
    },
    {
        "id": "itm_risotto",
        "category_id": "cat_mains",
        "name": "Mushroom Risotto",
        "description": "Arborio rice, porcini, parmesan",
        "price_cents": 1550,
        "is_available": True,
    },
    {
        "id": "itm_fries",
        "category_id": "cat_sides",
        "name": "Fries",
        "description": "Hand-cut, sea salt",
        "price_cents": 450,
        "is_available": True,
    },
    {
        "id": "itm_cheesecake",
        "category_id": "cat_desserts",
        "name": "Cheesecake",
        "description": "Baked, berry compote",
        "price_cents": 700,
        "is_available": False,
    },
]


def _upsert(session: Session, model: Any, values: dict[str, Any]) -> None:
    updates = {key: value for key, value in values.items() if key != "id"}
    session.execute(
        insert(model)
        .values(**values)
        .on_conflict_do_update(index_elements=[model.id], set_=updates)
    )


def main() -> None:
    configure_logging()
    engine = get_engine(timeout_seconds=2.0)
    required_tables = {"restaurants", "menus", "menu_categories", "menu_items"}
    if not required_tables.issubset(inspect(engine).get_table_names()):
        logger.error("seed_skipped", extra={"reason": "schema missing, run alembic upgrade head"})
        return

    with Session(engine) as session:
        _upsert(session, RestaurantModel, RESTAURANT)
        _upsert(session, MenuModel, {"id": MENU_ID, "restaurant_id": RESTAURANT_ID, "version": 1})
        for category in CATEGORIES:
            _upsert(session, MenuCategoryModel, {**category, "menu_id": MENU_ID})
        for item in ITEMS:
            _upsert(session, MenuItemModel, {**item, "menu_id": MENU_ID, "currency": "USD"})
        session.commit()

    logger.info(
        "seed_complete",
        extra={"restaurant_id": RESTAURANT_ID, "items": len(ITEMS)},
    )


if __name__ == "__main__":
    main()
