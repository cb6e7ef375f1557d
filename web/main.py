"""
FastAPI backend proxy for the Ads KPI dashboard.
"""
import os
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse, JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from web.config import VERSION
from web.routes import api
from web.routes.api._deps import limiter
from web.middleware import RequestLoggingMiddleware, RequestTimeoutMiddleware
from core.cache import cache
from core.config import config, validate_config, ConfigurationError
from core.exceptions import AdsAPIError, AdsConnectionError, AdsDataError, ValidationError
from core.observability import setup_logging, get_logger, get_correlation_id
from core.resilience import CircuitOpenError
from core.sources import build_source

# Configure structured logging
# Use JSON format in production (LOG_FORMAT=json), human-readable otherwise
log_format = os.getenv("LOG_FORMAT", "text")
log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(level=log_level, json_format=(log_format == "json"))
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Ads KPI Dashboard",
    description="Google Ads campaign reporting proxy and KPI service",
    version=VERSION,
    default_response_class=ORJSONResponse
)

# Add rate limiter to app state
app.state.limiter = limiter


def _error_response(status_code: int, error: str, detail=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "detail": detail,
            "correlation_id": get_correlation_id(),
        }
    )


# Custom rate limit exceeded handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": "Too many requests. Please try again later.",
            "retry_after": exc.detail
        }
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(400, str(exc), {"field": exc.field})


@app.exception_handler(AdsAPIError)
async def ads_api_error_handler(request: Request, exc: AdsAPIError):
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
    if status_code >= 500:
        logger.error(f"Upstream API error: {exc}", extra={"status_code": status_code})
    return _error_response(status_code, exc.message, exc.details)


@app.exception_handler(AdsDataError)
async def ads_data_error_handler(request: Request, exc: AdsDataError):
    logger.error(f"Unreadable upstream response: {exc}")
    return _error_response(502, exc.message, {"expected": exc.expected, "got": exc.got})


@app.exception_handler(AdsConnectionError)
async def ads_connection_error_handler(request: Request, exc: AdsConnectionError):
    response = _error_response(503, "Google Ads API unavailable", exc.message)
    if exc.retry_after:
        response.headers["Retry-After"] = str(exc.retry_after)
    return response


@app.exception_handler(CircuitOpenError)
async def circuit_open_handler(request: Request, exc: CircuitOpenError):
    return _error_response(503, "Google Ads API temporarily disabled", str(exc))


# Add request logging middleware (adds correlation IDs and timing)
app.add_middleware(RequestLoggingMiddleware)

# Add request timeout middleware
# Must be AFTER logging so correlation_id is set when timeout fires
app.add_middleware(RequestTimeoutMiddleware)

# Add Gzip compression (min 500 bytes to compress)
app.add_middleware(GZipMiddleware, minimum_size=500)

# Include routers
app.include_router(api.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Ads KPI Dashboard starting...")

    # Validate configuration early - fail fast with clear errors
    try:
        validate_config()
        logger.info("Configuration validated")
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}")
        raise SystemExit(1)

    app.state.source = build_source(config.ads)

    # Initialize Redis cache (non-fatal if unavailable)
    if await cache.connect():
        logger.info("Redis cache connected")
    else:
        logger.info("Redis cache not available, running without cache")

    logger.info(f"Dashboard ready - metrics source: {app.state.source.name}")


@app.on_event("shutdown")
async def shutdown_event():
    source = getattr(app.state, "source", None)
    if source is not None:
        try:
            await source.close()
        except Exception as e:
            logger.warning(f"Error closing metrics source: {e}")
        app.state.source = None

    try:
        await cache.disconnect()
    except Exception as e:
        logger.warning(f"Error disconnecting Redis: {e}")

    logger.info("Ads KPI Dashboard stopped")


if __name__ == "__main__":
    import uvicorn
    from web.config import WEB_HOST, WEB_PORT

    uvicorn.run("web.main:app", host=WEB_HOST, port=WEB_PORT)
