from __future__ import annotations

import logging

from pydantic import ValidationError

from qrmenu.application.dto.responses import MenuResponse
from qrmenu.application.mappers.menu_mapper import to_menu_response
from qrmenu.application.ports.cache import CacheStore
from qrmenu.application.ports.repositories import MenuRepository
from qrmenu.domain.common.ids import RestaurantId

logger = logging.getLogger(__name__)


class MenuNotFoundError(Exception):
    pass


def menu_version_cache_key(restaurant_id: RestaurantId) -> str:
    return f"menu:{restaurant_id}:version"


def menu_payload_cache_key(restaurant_id: RestaurantId, version: int) -> str:
    return f"menu:{restaurant_id}:v{version}"


class GetMenu:
    """Serve the live menu of a restaurant, read through a version-keyed cache."""

    def __init__(
        self,
        repository: MenuRepository,
        cache: CacheStore,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception:
            logger.warning("menu_cache_read_failed", extra={"key": key}, exc_info=True)
            return None

    def _cache_set(self, key: str, value: str) -> None:
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            logger.warning("menu_cache_write_failed", extra={"key": key}, exc_info=True)

    def _cached(self, restaurant_id: RestaurantId) -> MenuResponse | None:
        cached_version = self._cache_get(menu_version_cache_key(restaurant_id))
        if cached_version is None or not cached_version.isdigit():
            return None

        payload = self._cache_get(menu_payload_cache_key(restaurant_id, int(cached_version)))
        if not payload:
            return None
        try:
            return MenuResponse.model_validate_json(payload)
        except ValidationError:
            return None

    def execute(self, restaurant_id: RestaurantId) -> MenuResponse:
        cached = self._cached(restaurant_id)
        if cached is not None:
            return cached

        menu = self._repository.get_menu_by_restaurant_id(restaurant_id)
        if menu is None:
            raise MenuNotFoundError(f"menu not found for restaurant_id={restaurant_id}")

        response = to_menu_response(menu)
        self._cache_set(menu_version_cache_key(restaurant_id), str(response.menuVersion))
        self._cache_set(
            menu_payload_cache_key(restaurant_id, response.menuVersion),
            response.model_dump_json(),
        )
        return response
