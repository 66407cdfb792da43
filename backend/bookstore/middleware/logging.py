"""
Bookstore Backend — Request Logging Middleware
================================================

What:  One access-log line per HTTP request.
How:   Times the rest of the stack and logs method, path, status, duration
       and request ID. A request whose handler raised is logged as a 500
       before the exception continues to Starlette's error middleware.
When:  Runs inside RequestIDMiddleware so the request ID is already set.

Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bookstore.middleware.request_id import request_id_var

logger = logging.getLogger("bookstore.access")

# Health probes and the docs UI
SKIPPED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def log_request(request: Request, status: int, started: float, suffix: str = "") -> None:
    duration_ms = (time.perf_counter() - started) * 1000
    rid = request_id_var.get("")
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"

    logger.log(
        level_for_status(status),
        "%s %s %d %.1fms [%s]%s",
        request.method,
        target,
        status,
        duration_ms,
        rid,
        suffix,
        extra={
            "request_id": rid,
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
        },
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log_request(request, 500, started, " unhandled")
            raise

        log_request(request, response.status_code, started)
        return response
