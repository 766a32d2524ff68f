from __future__ import annotations

from typing import Protocol

EVENTS_CHANNEL_PREFIX = "events:"


class EventPublisher(Protocol):
    def publish(self, channel: str, message: str) -> None: ...


def restaurant_channel(restaurant_id: str) -> str:
    return f"{EVENTS_CHANNEL_PREFIX}{restaurant_id}"
