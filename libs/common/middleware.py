"""Request logging middleware for FastAPI.

Provides:
- Request ID generation and propagation
- Request/response timing

Usage:
    from libs.common.middleware import add_request_logging

    app = FastAPI()
    add_request_logging(app)
"""
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request's outcome and echoes an ``X-Request-ID`` header."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "Request failed with unhandled exception",
                extra={"extra_fields": {
                    **context,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                }},
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        if request.url.path != "/health":
            log_level = "warning" if response.status_code >= 400 else "info"
            getattr(logger, log_level)(
                "Request completed",
                extra={"extra_fields": {
                    **context,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }},
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def add_request_logging(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)
