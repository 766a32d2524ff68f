from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from qrmenu.api.error_handling import register_exception_handlers
from qrmenu.api.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from qrmenu.api.routes.health import router as health_router
from qrmenu.api.routes.menu import router as menu_router
from qrmenu.api.routes.metrics import router as metrics_router
from qrmenu.api.routes.orders import router as orders_router
from qrmenu.api.routes.restaurant_orders import router as restaurant_orders_router
from qrmenu.api.ws.manager import ConnectionManager
from qrmenu.api.ws.routes import router as ws_router
from qrmenu.application.dto.responses import OrderResponse
from qrmenu.application.use_cases.get_order import GetOrder
from qrmenu.application.use_cases.list_orders import ListRestaurantOrders
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrmenu.infrastructure.messaging.order_feed import LiveOrderFeed
from qrmenu.infrastructure.messaging.redis_event_listener import start_redis_fanout
from qrmenu.infrastructure.observability.logging_config import configure_logging
from qrmenu.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("qrmenu.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    if os.getenv("APP_ENV", "dev").lower() in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_path(request: Request) -> str:
    # Label by route template so order ids do not explode metric cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - started
            path = _route_path(request)
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": request.url.path,
                    "status_code": 500,
                    "duration_ms": round(elapsed * 1000, 2),
                },
            )
            raise

        elapsed = time.perf_counter() - started
        path = _route_path(request)
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )
        return response


async def _load_order(order_id: str) -> OrderResponse | None:
    use_case = GetOrder(order_repository=SqlAlchemyOrderRepository())
    return await run_in_threadpool(use_case.find, OrderId(order_id))


async def _count_pending_orders(restaurant_id: str) -> int:
    use_case = ListRestaurantOrders(order_repository=SqlAlchemyOrderRepository())
    return await run_in_threadpool(use_case.pending_count, RestaurantId(restaurant_id))


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.ws_manager = ConnectionManager()
    app.state.order_feed = LiveOrderFeed(loader=_load_order)
    app.state.pending_orders = _count_pending_orders
    fanout_task = asyncio.create_task(start_redis_fanout(app.state))
    app.state.redis_fanout_task = fanout_task
    try:
        yield
    finally:
        fanout_task.cancel()
        with suppress(asyncio.CancelledError):
            await fanout_task
        await app.state.order_feed.close()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="QR Menu Backend", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(menu_router)
    app.include_router(orders_router)
    app.include_router(restaurant_orders_router)
    app.include_router(ws_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", REQUEST_ID_HEADER],
    )

    configure_otel(app)
    return app


app = create_app()
