from __future__ import annotations

import logging

from qrmenu.application.dto.responses import ProfileResponse
from qrmenu.application.mappers.menu_mapper import to_profile_response
from qrmenu.application.ports.repositories import ProfileRepository
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.domain.restaurant.entities import RestaurantProfile, default_profile

logger = logging.getLogger(__name__)


class GetRestaurantProfile:
    def __init__(self, repository: ProfileRepository) -> None:
        self._repository = repository

    def load(self, restaurant_id: RestaurantId) -> RestaurantProfile:
        """Return the stored profile, or the defaults when it cannot be read."""
        try:
            profile = self._repository.get_profile(restaurant_id)
        except Exception:
            logger.warning(
                "profile_load_failed",
                extra={"restaurant_id": str(restaurant_id)},
                exc_info=True,
            )
            return default_profile(restaurant_id)

        if profile is None:
            logger.info("profile_missing", extra={"restaurant_id": str(restaurant_id)})
            return default_profile(restaurant_id)
        return profile

    def execute(self, restaurant_id: RestaurantId) -> ProfileResponse:
        return to_profile_response(self.load(restaurant_id))
