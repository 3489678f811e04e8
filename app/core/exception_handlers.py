"""Exception handlers for the HTTP routes.

Register with register_exception_handlers(app). Every error body has the
shape {"error", "message", "details"}. WebSocket sessions report domain
errors as messages instead (see app.api.v1.endpoints.websocket).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import StatusSyncException

logger = logging.getLogger(__name__)

# Domain error_code -> HTTP status; unknown codes are 400
ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "RESOURCE_NOT_FOUND": 404,
    "FEED_ALREADY_OPEN": 409,
    "OBSERVATION_STATE_ERROR": 409,
    "NOTIFICATION_DELIVERY_ERROR": 502,
    "SUBSCRIPTION_ERROR": 503,
    "SERVICE_UNAVAILABLE": 503,
}

RETRY_AFTER_SECONDS = "30"


def _error_response(
    status_code: int,
    error: str,
    message: Any,
    details: Any = None,
) -> JSONResponse:
    headers = {"Retry-After": RETRY_AFTER_SECONDS} if status_code == 503 else None
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "details": details or {}},
        headers=headers,
    )


def _status_sync_exception_handler(request: Request, exc: StatusSyncException) -> JSONResponse:
    status_code = ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status_code >= 500:
        logger.warning("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return _error_response(status_code, exc.error_code, exc.message, exc.details)


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(422, "VALIDATION_ERROR", "Request validation failed", exc.errors())


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, "HTTP_ERROR", exc.detail)


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception on %s", request.url.path)
    detail = str(exc) if get_settings().debug else "Internal server error"
    return _error_response(500, "INTERNAL_ERROR", detail)


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for StatusSyncException (and subclasses),
    RequestValidationError, StarletteHTTPException and Exception."""
    app.add_exception_handler(StatusSyncException, _status_sync_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
