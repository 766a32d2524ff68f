from __future__ import annotations

import logging

from qrmenu.application.ports.publisher import EventPublisher
from qrmenu.infrastructure.cache.redis_client import DEFAULT_TIMEOUT_SECONDS, get_redis_client

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> None:
        receivers = get_redis_client(self._timeout_seconds).publish(channel, message)
        logger.debug("event_published", extra={"channel": channel, "receivers": receivers})
