from __future__ import annotations

from datetime import date, datetime, timezone

from qrmenu.domain.common.ids import RestaurantId


def day_bucket(now: datetime) -> str:
    """Calendar day, in UTC, that an order placed at ``now`` is numbered under."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).date().isoformat()


def counter_key(restaurant_id: RestaurantId, day: str) -> str:
    date.fromisoformat(day)
    return f"{restaurant_id}_{day}"
