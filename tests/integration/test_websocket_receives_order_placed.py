from __future__ import annotations

import json
import sys
import threading
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrmenu.api.main import app


def _receive_in_background(websocket, holder: dict[str, object]) -> threading.Thread:
    def _receive() -> None:
        try:
            holder["message"] = websocket.receive_text()
        except Exception as exc:
            holder["error"] = exc

    receiver = threading.Thread(target=_receive, daemon=True)
    receiver.start()
    return receiver


def test_dashboard_websocket_receives_order_placed_event() -> None:
    with TestClient(app) as client:
        with client.websocket_connect(
            "/ws?restaurant_id=demo-bistro", headers={"X-User-Id": "demo-bistro"}
        ) as websocket:
            greeting = websocket.receive_json()
            assert greeting["event_type"] == "dashboard.pending_count"

            holder: dict[str, object] = {}
            receiver = _receive_in_background(websocket, holder)

            response = client.post(
                "/v1/restaurants/demo-bistro/orders",
                json={"customerIdentifier": "5", "items": [{"itemId": "itm_fries", "quantity": 2}]},
            )
            assert response.status_code == 201

            receiver.join(timeout=3.0)
            assert not receiver.is_alive(), "timed out waiting for websocket event"
            assert "error" not in holder

            payload = json.loads(str(holder["message"]))
            assert payload["event_type"] == "order.placed"
            assert payload["restaurant_id"] == "demo-bistro"
            assert payload["payload"]["total"]["amountCents"] == 900


def test_status_websocket_follows_owner_updates(owner_headers) -> None:
    with TestClient(app) as client:
        placed = client.post(
            "/v1/restaurants/demo-bistro/orders",
            json={"customerIdentifier": "6", "items": [{"itemId": "itm_risotto", "quantity": 1}]},
        ).json()
        order_id = placed["orderId"]

        with client.websocket_connect(f"/ws/orders/{order_id}") as websocket:
            snapshot = websocket.receive_json()
            assert snapshot["type"] == "status"
            assert snapshot["status"]["status"] == "Received"
            assert snapshot["status"]["customerLabel"] == "Table #6"

            holder: dict[str, object] = {}
            receiver = _receive_in_background(websocket, holder)

            response = client.patch(
                f"/v1/restaurants/demo-bistro/orders/{order_id}/status",
                json={"status": "Finishing"},
                headers=owner_headers,
            )
            assert response.status_code == 200

            receiver.join(timeout=3.0)
            assert not receiver.is_alive(), "timed out waiting for status update"
            update = json.loads(str(holder["message"]))
            assert update["status"]["status"] == "Finishing"
            assert update["status"]["label"] == "Finishing Touches"
