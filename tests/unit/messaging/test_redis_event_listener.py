from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from types import SimpleNamespace

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.application.mappers.event_envelope import ORDER_STATUS_CHANGED
from qrmenu.application.mappers.order_mapper import to_order_response
from qrmenu.infrastructure.messaging.redis_event_listener import EVENTS_PATTERN, dispatch_event


class RecordingManager:
    def __init__(self) -> None:
        self.broadcasts: list[tuple[str, str]] = []

    async def broadcast(self, restaurant_id: str, message_json_str: str) -> None:
        self.broadcasts.append((restaurant_id, message_json_str))


class RecordingFeed:
    def __init__(self) -> None:
        self.published = []

    def publish(self, order) -> None:
        self.published.append(order)


def _state() -> SimpleNamespace:
    return SimpleNamespace(ws_manager=RecordingManager(), order_feed=RecordingFeed())


def test_pattern_covers_restaurant_channels() -> None:
    assert EVENTS_PATTERN == "events:*"


def test_order_events_reach_dashboard_and_feed(order_factory) -> None:
    state = _state()
    order = to_order_response(order_factory(version=2))
    message = json.dumps(
        {"event_type": ORDER_STATUS_CHANGED, "payload": order.model_dump(mode="json")}
    )

    asyncio.run(dispatch_event(state, "events:demo-bistro", message))

    assert state.ws_manager.broadcasts == [("demo-bistro", message)]
    assert [published.version for published in state.order_feed.published] == [2]


def test_other_events_only_reach_dashboard() -> None:
    state = _state()
    message = json.dumps({"event_type": "menu.updated", "payload": {}})

    asyncio.run(dispatch_event(state, "events:demo-bistro", message))

    assert len(state.ws_manager.broadcasts) == 1
    assert state.order_feed.published == []


def test_malformed_order_payload_is_not_published() -> None:
    state = _state()
    message = json.dumps({"event_type": ORDER_STATUS_CHANGED, "payload": {"orderId": "x"}})

    asyncio.run(dispatch_event(state, "events:demo-bistro", message))

    assert len(state.ws_manager.broadcasts) == 1
    assert state.order_feed.published == []


def test_unknown_channel_is_ignored() -> None:
    state = _state()

    asyncio.run(dispatch_event(state, "audit:demo-bistro", "{}"))
    asyncio.run(dispatch_event(state, "events:", "{}"))

    assert state.ws_manager.broadcasts == []


def test_order_events_push_a_fresh_pending_count(order_factory) -> None:
    state = _state()
    counts = iter([2, 1])

    async def pending_orders(restaurant_id: str) -> int:
        return next(counts)

    state.pending_orders = pending_orders
    placed = json.dumps(
        {
            "event_type": ORDER_STATUS_CHANGED,
            "payload": to_order_response(order_factory()).model_dump(mode="json"),
        }
    )

    asyncio.run(dispatch_event(state, "events:demo-bistro", placed))
    asyncio.run(dispatch_event(state, "events:demo-bistro", placed))
    asyncio.run(dispatch_event(state, "events:demo-bistro", json.dumps({"event_type": "x"})))

    pushed = [
        json.loads(message)
        for _, message in state.ws_manager.broadcasts
        if json.loads(message)["event_type"] == "dashboard.pending_count"
    ]
    assert [event["payload"]["pendingCount"] for event in pushed] == [2, 1]


def test_pending_count_failure_does_not_stop_dispatch(order_factory) -> None:
    state = _state()

    async def pending_orders(restaurant_id: str) -> int:
        raise RuntimeError("database offline")

    state.pending_orders = pending_orders
    message = json.dumps(
        {
            "event_type": ORDER_STATUS_CHANGED,
            "payload": to_order_response(order_factory()).model_dump(mode="json"),
        }
    )

    asyncio.run(dispatch_event(state, "events:demo-bistro", message))

    assert state.ws_manager.broadcasts == [("demo-bistro", message)]
    assert len(state.order_feed.published) == 1
