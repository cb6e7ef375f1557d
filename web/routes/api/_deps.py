"""Shared dependencies for API route modules."""
import time
from typing import Optional

from fastapi import Header, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.cache import RedisCache, cache
from core.config import config
from core.exceptions import ValidationError
from core.models import RequestContext
from core.observability import get_correlation_id, get_logger
from core.sources import MetricsSource, build_source
from core.validators import (
    validate_bucket,
    validate_campaign_id,
    validate_customer_id,
    validate_period,
)
from web.config import RATE_LIMIT

# Shared limiter instance
limiter = Limiter(key_func=get_remote_address)

# Track startup time for uptime calculation
START_TIME = time.time()


def get_source(request: Request) -> MetricsSource:
    """Metrics source created at startup, built on first use otherwise."""
    source = getattr(request.app.state, "source", None)
    if source is None:
        source = build_source(config.ads)
        request.app.state.source = source
    return source


def get_cache() -> RedisCache:
    return cache


def get_request_context(
    x_google_ads_cid: Optional[str] = Header(None, alias="X-Google-Ads-CID"),
) -> RequestContext:
    """
    Per-request account context.

    Raises:
        ValidationError: If the X-Google-Ads-CID header is not a 10-digit id
    """
    customer_id = validate_customer_id(x_google_ads_cid, field="X-Google-Ads-CID")
    return RequestContext(
        customer_id=customer_id or validate_customer_id(config.ads.default_customer_id),
        correlation_id=get_correlation_id(),
    )


__all__ = [
    "limiter",
    "RATE_LIMIT",
    "START_TIME",
    "get_source",
    "get_cache",
    "get_request_context",
    "get_logger",
    "validate_bucket",
    "validate_campaign_id",
    "validate_period",
    "ValidationError",
]
