from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.domain.common.ids import MenuId, MenuItemId, RestaurantId
from qrmenu.domain.common.money import Money
from qrmenu.domain.menu.entities import Menu, MenuItem


def test_menu_item_name_must_be_non_empty() -> None:
    with pytest.raises(ValueError):
        MenuItem(
            item_id=MenuItemId("itm_burger"),
            name="   ",
            description=None,
            price_money=Money(amount_cents=899, currency="USD"),
            is_available=True,
        )


def test_menu_version_must_be_gte_one() -> None:
    with pytest.raises(ValueError):
        Menu(menu_id=MenuId("men_001"), restaurant_id=RestaurantId("demo-bistro"), version=0)


def test_find_item_by_id(menu_factory) -> None:
    menu = menu_factory()

    assert menu.find_item("itm_risotto").price_money.amount_cents == 1550
    assert menu.find_item("itm_unknown") is None
