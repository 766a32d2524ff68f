from __future__ import annotations

from fastapi import Header

USER_ID_HEADER = "X-User-Id"


class NotAuthenticatedError(Exception):
    pass


class ForbiddenError(Exception):
    pass


def ensure_owner(user_id: str | None, restaurant_id: str) -> str:
    """An owner signs in with the restaurant id as their user id."""
    if not user_id or not user_id.strip():
        raise NotAuthenticatedError(f"{USER_ID_HEADER} header is required")
    if user_id.strip() != restaurant_id:
        raise ForbiddenError(f"user may not manage restaurant {restaurant_id}")
    return restaurant_id


def require_owner(
    restaurant_id: str,
    user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    return ensure_owner(user_id, restaurant_id)
