"""
FastAPI middleware for observability.

Provides:
- Request correlation ID injection
- Request/response logging with the advertiser account
- Timing metrics
- Request timeout protection
"""
import asyncio
import time
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse

from core.observability import (
    get_logger,
    generate_correlation_id,
    set_correlation_id,
    get_correlation_id,
    metrics,
)
from core.config import config
from core.google_ads import search_time_budget

logger = get_logger(__name__)

# Request timeout (seconds). Sits above the full retry budget of one live
# search so the client finishes its attempts and settles the circuit breaker
# before the request is cancelled.
DEFAULT_REQUEST_TIMEOUT = search_time_budget(config.ads.request_timeout) + 10.0

# Paths excluded from request logs and the timeout
QUIET_PATHS = ("/api/health", "/health")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that:
    1. Assigns correlation ID to each request
    2. Logs request start/end with timing
    3. Records metrics
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Request-ID") or generate_correlation_id()
        set_correlation_id(correlation_id)

        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        customer_id = request.headers.get("X-Google-Ads-CID")
        is_quiet = path in QUIET_PATHS

        if not is_quiet:
            logger.info(
                f"Request started: {method} {path}",
                extra={
                    "method": method,
                    "path": path,
                    "client_ip": request.client.host if request.client else "unknown",
                    "customer_id": customer_id,
                }
            )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {method} {path}",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": round(duration_ms, 2),
                    "error": str(e),
                }
            )
            metrics.record_error(type(e).__name__)
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if not is_quiet:
            level_name = "info" if response.status_code < 400 else "warning"
            getattr(logger, level_name)(
                f"Request completed: {method} {path}",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )

        # Route template keeps per-campaign URLs in one bucket
        route = request.scope.get("route")
        endpoint = f"{method} {getattr(route, 'path', path)}"
        metrics.record_request(endpoint)
        metrics.record_timing(endpoint, duration_ms)

        if response.status_code >= 400:
            metrics.record_error(f"HTTP_{response.status_code}")

        return response


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """
    Middleware that enforces request timeout.

    Returns 504 Gateway Timeout if request exceeds timeout.
    """

    def __init__(self, app, timeout: float = DEFAULT_REQUEST_TIMEOUT):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path

        if path in QUIET_PATHS:
            return await call_next(request)

        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Request timeout: {request.method} {path}",
                extra={
                    "method": request.method,
                    "path": path,
                    "timeout": self.timeout,
                }
            )
            metrics.record_error("REQUEST_TIMEOUT")
            return JSONResponse(
                status_code=504,
                content={
                    "error": "Request Timeout",
                    "detail": f"Request exceeded {self.timeout}s timeout",
                    "path": path,
                    "correlation_id": get_correlation_id(),
                }
            )
