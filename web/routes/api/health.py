"""Health check and metrics endpoints."""
import time

from fastapi import APIRouter, Depends, Request

from core.cache import RedisCache
from core.observability import get_correlation_id, metrics
from core.sources import MetricsSource
from web.config import VERSION
from web.schemas import HealthResponse, MetricsResponse
from ._deps import limiter, get_cache, get_source, START_TIME

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
@limiter.limit("60/minute")
async def health_check(
    request: Request,
    source: MetricsSource = Depends(get_source),
    cache: RedisCache = Depends(get_cache),
):
    """Health check endpoint for Docker/load balancer monitoring."""
    cache_stats = cache.get_stats()

    # A configured cache that could not connect still serves requests, uncached
    degraded = cache_stats["enabled"] and not cache_stats["connected"]

    return {
        "status": "degraded" if degraded else "healthy",
        "version": VERSION,
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
        "source": source.name,
        "cache": cache_stats,
    }


@router.get("/metrics", response_model=MetricsResponse)
@limiter.limit("60/minute")
async def get_metrics_endpoint(request: Request):
    """Get application metrics."""
    return {
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
        **metrics.get_stats(),
    }
