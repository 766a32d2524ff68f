from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from qrmenu.api.middleware.request_id import get_request_id
from qrmenu.api.security import ForbiddenError, NotAuthenticatedError
from qrmenu.application.use_cases.get_menu import MenuNotFoundError as GetMenuNotFoundError
from qrmenu.application.use_cases.get_order import OrderNotFoundError
from qrmenu.application.use_cases.order_statistics import (
    InvalidStatisticsWindowError,
    MixedCurrencyStatisticsError,
)
from qrmenu.application.use_cases.place_order import (
    CounterUnavailableError,
    InvalidOrderError,
    MenuItemUnavailableError,
    OrderWriteConflictError,
)
from qrmenu.application.use_cases.place_order import (
    MenuNotFoundError as PlaceOrderMenuNotFoundError,
)
from qrmenu.application.use_cases.update_order_status import (
    InvalidOrderStatusError,
    InvalidOrderTransitionError,
    OrderConflictError,
)

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": jsonable_encoder(details or {}),
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.warning(
                "request_failed",
                extra={"path": request.url.path, "code": code, "error": str(exc)},
            )
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    return _error_response(
        status_code=http_exc.status_code,
        code=_HTTP_ERROR_CODES.get(http_exc.status_code, "HTTP_ERROR"),
        message=str(http_exc.detail) if http_exc.detail else "request failed",
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (NotAuthenticatedError, 401, "UNAUTHENTICATED"),
        (ForbiddenError, 403, "FORBIDDEN"),
        (GetMenuNotFoundError, 404, "MENU_NOT_FOUND"),
        (PlaceOrderMenuNotFoundError, 404, "MENU_NOT_FOUND"),
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (MenuItemUnavailableError, 400, "MENU_ITEM_UNAVAILABLE"),
        (InvalidOrderError, 400, "INVALID_ORDER"),
        (InvalidOrderStatusError, 400, "INVALID_ORDER_STATUS"),
        (InvalidStatisticsWindowError, 400, "INVALID_STATISTICS_WINDOW"),
        (MixedCurrencyStatisticsError, 409, "MIXED_CURRENCY"),
        (InvalidOrderTransitionError, 409, "INVALID_ORDER_TRANSITION"),
        (OrderConflictError, 409, "CONFLICT"),
        (OrderWriteConflictError, 409, "WRITE_CONFLICT"),
        (CounterUnavailableError, 503, "COUNTER_UNAVAILABLE"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
