"""Exception handlers turning errors into consistent JSON responses.

- AccessError subclasses → their own ``http_status`` (400/401/403/404/409/429)
- StoreError → 503
- RequestValidationError → 422
- anything else → generic 500 with the traceback logged

Every body has the shape ``{"error": {"code", "message", "details"?}}`` and
error responses carry CORS headers for allowed origins, because the
CORSMiddleware does not see responses built by exception handlers.
"""

import logging
from typing import Dict, List

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from contact_access.core.errors import AccessError, RateLimitExceeded, StoreError

logger = logging.getLogger(__name__)


def _cors_headers(request: Request, allowed_origins: List[str]) -> Dict[str, str]:
    origin = request.headers.get("origin")
    headers: Dict[str, str] = {}
    if origin and origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers


def _error_response(status_code: int, code: str, message: str, details=None, headers=None) -> JSONResponse:
    body = {"code": code, "message": message}
    if details:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


def setup_exception_handlers(app: FastAPI, allowed_origins: List[str]) -> None:
    @app.exception_handler(AccessError)
    async def access_error_handler(request: Request, exc: AccessError):
        logger.warning(
            "access_error",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "status_code": exc.http_status,
                "path": request.url.path,
            },
        )
        headers = _cors_headers(request, allowed_origins)
        if isinstance(exc, RateLimitExceeded):
            headers["Retry-After"] = str(exc.retry_after_seconds)
            headers["X-RateLimit-Limit"] = str(exc.limit)
        elif exc.http_status == 401:
            headers["WWW-Authenticate"] = "Bearer"
        return _error_response(exc.http_status, exc.code, exc.message, exc.details, headers)

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("store_error", extra={"path": request.url.path, "cause": repr(exc.cause)})
        return _error_response(
            exc.http_status,
            exc.code,
            "Service temporarily unavailable",
            headers=_cors_headers(request, allowed_origins),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(
            422,
            "validation_error",
            "Request validation failed",
            {"errors": exc.errors()},
            _cors_headers(request, allowed_origins),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", extra={"path": request.url.path})
        return _error_response(
            500,
            "internal_error",
            "Internal server error",
            headers=_cors_headers(request, allowed_origins),
        )
