from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from redis import asyncio as redis_asyncio

from qrmenu.application.dto.responses import OrderResponse
from qrmenu.application.mappers.event_envelope import ORDER_EVENT_PREFIX, serialize_pending_count
from qrmenu.application.ports.publisher import EVENTS_CHANNEL_PREFIX

logger = logging.getLogger(__name__)

EVENTS_PATTERN = f"{EVENTS_CHANNEL_PREFIX}*"
MAX_BACKOFF_SECONDS = 5.0


def _as_text(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


async def dispatch_event(app_state: Any, channel: str, message: str) -> None:
    """Route one published envelope to the dashboard sockets and the order feed.

    Order events are also followed by a fresh pending-order count for the
    restaurant's dashboards when ``app_state.pending_orders`` is set.
    """
    restaurant_id = channel.removeprefix(EVENTS_CHANNEL_PREFIX)
    if not restaurant_id or restaurant_id == channel:
        logger.warning("redis_fanout_invalid_channel", extra={"channel": channel})
        return

    await app_state.ws_manager.broadcast(restaurant_id=restaurant_id, message_json_str=message)

    try:
        envelope = json.loads(message)
    except json.JSONDecodeError:
        logger.warning("redis_fanout_invalid_payload", extra={"channel": channel})
        return
    if not isinstance(envelope, dict):
        logger.warning("redis_fanout_invalid_payload", extra={"channel": channel})
        return
    event_type = str(envelope.get("event_type", ""))
    if not event_type.startswith(ORDER_EVENT_PREFIX):
        return

    order_feed = getattr(app_state, "order_feed", None)
    if order_feed is not None:
        try:
            order = OrderResponse.model_validate(envelope.get("payload"))
        except ValidationError:
            logger.warning(
                "redis_fanout_invalid_order",
                extra={"channel": channel, "event_type": event_type},
            )
        else:
            order_feed.publish(order)

    await broadcast_pending_count(app_state, restaurant_id)


async def broadcast_pending_count(app_state: Any, restaurant_id: str) -> None:
    pending_orders = getattr(app_state, "pending_orders", None)
    if pending_orders is None:
        return
    try:
        pending_count = await pending_orders(restaurant_id)
    except Exception:
        logger.warning(
            "pending_count_failed",
            extra={"restaurant_id": restaurant_id},
            exc_info=True,
        )
        return
    await app_state.ws_manager.broadcast(
        restaurant_id=restaurant_id,
        message_json_str=serialize_pending_count(
            restaurant_id=restaurant_id,
            pending_count=pending_count,
            occurred_at=datetime.now(timezone.utc),
        ),
    )


async def _close(resource: Any) -> None:
    aclose = getattr(resource, "aclose", None)
    if callable(aclose):
        await aclose()
    else:
        await resource.close()


async def start_redis_fanout(app_state: Any) -> None:
    redis_url = os.getenv("REDIS_URL")
    if not redis_url:
        logger.warning("redis_fanout_not_started", extra={"reason": "REDIS_URL missing"})
        return

    backoff_seconds = 1.0
    while True:
        client: redis_asyncio.Redis | None = None
        pubsub: Any = None
        try:
            client = redis_asyncio.from_url(redis_url)
            pubsub = client.pubsub()
            await pubsub.psubscribe(EVENTS_PATTERN)
            logger.info("redis_fanout_subscribed", extra={"pattern": EVENTS_PATTERN})
            backoff_seconds = 1.0

            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    await asyncio.sleep(0.05)
                    continue

                channel = _as_text(message.get("channel"))
                payload = _as_text(message.get("data"))
                if channel and payload:
                    await dispatch_event(app_state, channel, payload)
        except asyncio.CancelledError:
            logger.info("redis_fanout_cancelled")
            raise
        except Exception:
            logger.exception("redis_fanout_error", extra={"backoff_seconds": backoff_seconds})
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, MAX_BACKOFF_SECONDS)
        finally:
            if pubsub is not None:
                await _close(pubsub)
            if client is not None:
                await _close(client)
