from __future__ import annotations

from qrmenu.application.dto.responses import MenuLinkResponse
from qrmenu.domain.common.ids import RestaurantId


class GetMenuLink:
    """Public menu URL of a restaurant; this is what its QR code encodes."""

    def __init__(self, public_base_url: str) -> None:
        self._public_base_url = public_base_url.rstrip("/")

    def execute(self, restaurant_id: RestaurantId) -> MenuLinkResponse:
        return MenuLinkResponse(
            restaurantId=str(restaurant_id),
            url=f"{self._public_base_url}/menu/{restaurant_id}",
        )
