from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from qrmenu.api.security import USER_ID_HEADER, ForbiddenError, NotAuthenticatedError, ensure_owner
from qrmenu.api.ws.manager import ConnectionManager
from qrmenu.application.dto.responses import OrderStatusMessage
from qrmenu.application.mappers.event_envelope import serialize_pending_count
from qrmenu.application.use_cases.get_profile import GetRestaurantProfile
from qrmenu.application.use_cases.order_status_view import OrderStatusView
from qrmenu.domain.common.ids import RestaurantId
from qrmenu.domain.restaurant.entities import RestaurantProfile
from qrmenu.infrastructure.db.repositories.menu_repo import SqlAlchemyProfileRepository

router = APIRouter()
logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008


def _profile_use_case() -> GetRestaurantProfile:
    return GetRestaurantProfile(repository=SqlAlchemyProfileRepository())


async def _load_profile(restaurant_id: RestaurantId) -> RestaurantProfile:
    return await run_in_threadpool(_profile_use_case().load, restaurant_id)


async def _send_pending_count(websocket: WebSocket, restaurant_id: str) -> None:
    pending_orders = getattr(websocket.app.state, "pending_orders", None)
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
    await websocket.send_text(
        serialize_pending_count(
            restaurant_id=restaurant_id,
            pending_count=pending_count,
            occurred_at=datetime.now(timezone.utc),
        )
    )


async def _drain(websocket: WebSocket) -> None:
    while True:
        await websocket.receive_text()


@router.websocket("/ws")
async def dashboard_websocket(websocket: WebSocket) -> None:
    restaurant_id = websocket.query_params.get("restaurant_id")
    if not restaurant_id:
        await websocket.close(code=POLICY_VIOLATION, reason="restaurant_id is required")
        return

    # Browsers cannot set headers on a WebSocket handshake.
    user_id = websocket.headers.get(USER_ID_HEADER) or websocket.query_params.get("user_id")
    try:
        ensure_owner(user_id, restaurant_id)
    except (NotAuthenticatedError, ForbiddenError) as exc:
        logger.warning("ws_dashboard_rejected", extra={"restaurant_id": restaurant_id})
        await websocket.close(code=POLICY_VIOLATION, reason=str(exc))
        return

    manager: ConnectionManager = websocket.app.state.ws_manager
    await manager.register(websocket=websocket, restaurant_id=restaurant_id)
    try:
        await _send_pending_count(websocket, restaurant_id)
        await _drain(websocket)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("ws_connection_error", extra={"restaurant_id": restaurant_id})
    finally:
        await manager.unregister(websocket)


@router.websocket("/ws/orders/{order_id}")
async def order_status_websocket(websocket: WebSocket, order_id: str) -> None:
    await websocket.accept()

    async def send(message: OrderStatusMessage) -> None:
        await websocket.send_text(message.model_dump_json())

    view = OrderStatusView(feed=websocket.app.state.order_feed, load_profile=_load_profile)
    subscription = view.open(order_id, send)
    try:
        await _drain(websocket)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("ws_connection_error", extra={"order_id": order_id})
    finally:
        subscription.cancel()
