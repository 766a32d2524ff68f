from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from qrmenu.application.dto.responses import OrderResponse
from qrmenu.application.metrics.order_lifecycle import (
    record_status_subscription_closed,
    record_status_subscription_opened,
)
from qrmenu.application.ports.order_feed import (
    OrderErrorCallback,
    OrderFeed,
    OrderUpdateCallback,
)

logger = logging.getLogger(__name__)

OrderLoader = Callable[[str], Awaitable[OrderResponse | None]]

_CLOSED = object()


class LiveOrderSubscription:
    """One listener on one order.

    The initial snapshot comes from the loader; later versions arrive through
    ``push``. A pump task delivers them in order and skips any version that is
    not newer than the last one delivered.
    """

    def __init__(
        self,
        feed: LiveOrderFeed,
        order_id: str,
        on_update: OrderUpdateCallback,
        on_error: OrderErrorCallback,
    ) -> None:
        self.order_id = order_id
        self._feed = feed
        self._on_update = on_update
        self._on_error = on_error
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._active = True
        self._last_version = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._pump())

    def push(self, order: OrderResponse) -> None:
        if self._active:
            self._queue.put_nowait(order)

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._discard(self)
        self._queue.put_nowait(_CLOSED)
        record_status_subscription_closed()

    async def _pump(self) -> None:
        try:
            snapshot = await self._feed.load(self.order_id)
        except Exception as exc:
            if self._active:
                await self._report(exc)
            self.cancel()
            return

        if not self._active:
            return
        if snapshot is None:
            await self._deliver_missing()
            self.cancel()
            return

        await self._deliver(snapshot)
        while self._active:
            item = await self._queue.get()
            if item is _CLOSED:
                break
            if isinstance(item, OrderResponse):
                await self._deliver(item)

    async def _deliver(self, order: OrderResponse) -> None:
        if not self._active or order.version <= self._last_version:
            return
        self._last_version = order.version
        try:
            await self._on_update(order)
        except Exception:
            logger.exception("order_feed_callback_failed", extra={"order_id": self.order_id})
            self.cancel()

    async def _deliver_missing(self) -> None:
        try:
            await self._on_update(None)
        except Exception:
            logger.exception("order_feed_callback_failed", extra={"order_id": self.order_id})

    async def _report(self, exc: Exception) -> None:
        try:
            await self._on_error(exc)
        except Exception:
            logger.exception("order_feed_error_callback_failed", extra={"order_id": self.order_id})


class LiveOrderFeed(OrderFeed):
    """In-process fan-out of order snapshots to per-order subscribers."""

    def __init__(self, loader: OrderLoader) -> None:
        self._loader = loader
        self._subscriptions: dict[str, set[LiveOrderSubscription]] = {}

    def subscribe(
        self,
        order_id: str,
        on_update: OrderUpdateCallback,
        on_error: OrderErrorCallback,
    ) -> LiveOrderSubscription:
        subscription = LiveOrderSubscription(self, order_id, on_update, on_error)
        self._subscriptions.setdefault(order_id, set()).add(subscription)
        record_status_subscription_opened()
        subscription.start()
        logger.info("order_feed_subscribed", extra={"order_id": order_id})
        return subscription

    def publish(self, order: OrderResponse) -> None:
        for subscription in list(self._subscriptions.get(order.orderId, ())):
            subscription.push(order)

    def subscriber_count(self, order_id: str) -> int:
        return len(self._subscriptions.get(order_id, ()))

    async def load(self, order_id: str) -> OrderResponse | None:
        return await self._loader(order_id)

    async def close(self) -> None:
        subscriptions = [sub for subs in self._subscriptions.values() for sub in subs]
        tasks = [sub.task for sub in subscriptions if sub.task is not None]
        for subscription in subscriptions:
            subscription.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _discard(self, subscription: LiveOrderSubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.order_id)
        if subscriptions is None:
            return
        subscriptions.discard(subscription)
        if not subscriptions:
            del self._subscriptions[subscription.order_id]
