"""Request/response logging middleware."""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger("phonebook.api")

http_requests_total = Counter(
    "phonebook_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

http_request_latency_seconds = Histogram(
    "phonebook_http_request_latency_seconds",
    "HTTP request latency",
    ["method", "route"],
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Structured logging and request metrics for inbound HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        # Route templates keep metric label cardinality bounded.
        route = request.scope.get("route")
        route_path = getattr(route, "path", request.url.path)
        http_requests_total.labels(method=request.method, route=route_path, status=str(response.status_code)).inc()
        http_request_latency_seconds.labels(method=request.method, route=route_path).observe(duration)

        logger.info(
            "request.completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "duration_ms": round(duration * 1000, 2),
                "client": request.client.host if request.client else None,
            },
        )

        return response
