"""Exception → JSON response mapping for the settings API.

Every error body has the shape {"error", "message", "details", "request_id"}
so the web app can show the message and support can find the request in logs.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import AdAlertException

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "STORAGE_PERMISSION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PAYMENT_FAILED": 402,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "DUPLICATE_EMAIL": 409,
    # Remote collaborators (Firestore, email endpoint, Stripe, object storage)
    "RECORD_STORE_ERROR": 502,
    "EMAIL_DISPATCH_ERROR": 502,
    "PAYMENT_GATEWAY_ERROR": 502,
    "STORAGE_UPLOAD_ERROR": 502,
    "STORAGE_DELETE_ERROR": 502,
}

_HTTP_ERROR_CODES: dict[int, str] = {
    401: "AUTHENTICATION_ERROR",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    502: "UPSTREAM_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: Any,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details if details is not None else {},
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=headers,
    )


def _adalert_exception_handler(request: Request, exc: AdAlertException) -> JSONResponse:
    status_code = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status_code >= 500:
        logger.warning("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return _error_response(
        request, status_code, exc.error_code, exc.message, exc.details, headers
    )


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        request, 422, "VALIDATION_ERROR", "Request validation failed", exc.errors()
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(
        request,
        exc.status_code,
        _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
        exc.detail,
        headers=getattr(exc, "headers", None),
    )


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info("Rate limit hit on %s: %s", request.url.path, exc.detail)
    return _error_response(
        request, 429, "RATE_LIMITED", "Too many requests, try again shortly", {"limit": exc.detail}
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return _error_response(request, 500, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers; call once from create_app()."""
    app.add_exception_handler(AdAlertException, _adalert_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
