from __future__ import annotations

import os

from fastapi import APIRouter, Depends, Header, Response

from qrmenu.api.security import require_owner
from qrmenu.application.dto.responses import MenuLinkResponse, MenuResponse, ProfileResponse
from qrmenu.application.use_cases.get_menu import GetMenu
from qrmenu.application.use_cases.get_profile import GetRestaurantProfile
from qrmenu.application.use_cases.menu_link import GetMenuLink
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.infrastructure.cache.cache_store import RedisCacheStore
from qrmenu.infrastructure.db.repositories.menu_repo import (
    SqlAlchemyMenuRepository,
    SqlAlchemyProfileRepository,
)

router = APIRouter(tags=["menu"])

DEFAULT_MENU_CACHE_TTL_SECONDS = 300
DEFAULT_PUBLIC_BASE_URL = "http://localhost:5173"


def _menu_cache_ttl_seconds() -> int:
    raw_value = os.getenv("MENU_CACHE_TTL_SECONDS", "")
    return int(raw_value) if raw_value.isdigit() else DEFAULT_MENU_CACHE_TTL_SECONDS


def _get_menu_use_case() -> GetMenu:
    return GetMenu(
        repository=SqlAlchemyMenuRepository(),
        cache=RedisCacheStore(),
        ttl_seconds=_menu_cache_ttl_seconds(),
    )


def _get_profile_use_case() -> GetRestaurantProfile:
    return GetRestaurantProfile(repository=SqlAlchemyProfileRepository())


def _get_menu_link_use_case() -> GetMenuLink:
    return GetMenuLink(public_base_url=os.getenv("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL))


@router.get("/v1/restaurants/{restaurant_id}/menu", response_model=MenuResponse)
def get_menu(
    restaurant_id: str,
    response: Response,
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
) -> MenuResponse | Response:
    payload = _get_menu_use_case().execute(RestaurantId(restaurant_id))

    etag = f'"menu-v{payload.menuVersion}"'
    if if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    return payload


@router.get("/v1/restaurants/{restaurant_id}/profile", response_model=ProfileResponse)
def get_profile(restaurant_id: str) -> ProfileResponse:
    return _get_profile_use_case().execute(RestaurantId(restaurant_id))


@router.get("/v1/restaurants/{restaurant_id}/menu-link", response_model=MenuLinkResponse)
def get_menu_link(restaurant_id: str = Depends(require_owner)) -> MenuLinkResponse:
    return _get_menu_link_use_case().execute(RestaurantId(restaurant_id))
