"""
Server-side KPI computation with a Redis freshness window.

Rows are pulled from the active metrics source for the bucket that serves
the requested period, folded, and the resulting KPI payload is cached under
kpi:{customer}:{campaign}:{period}. Identical concurrent requests that both
miss the cache each fetch their own rows.
"""
from typing import Any, Dict, Optional

from core.aggregation import build_kpi
from core.cache import RedisCache
from core.models import Period, RequestContext
from core.observability import Timer, get_logger
from core.periods import resolve_period
from core.sources import MetricsSource
from web.config import KPI_CACHE_TTL

logger = get_logger(__name__)


def kpi_cache_key(context: RequestContext, campaign_id: str, period: Period) -> str:
    return f"kpi:{context.customer_id or 'default'}:{campaign_id}:{period.value}"


async def get_campaign_kpi(
    source: MetricsSource,
    cache: RedisCache,
    campaign_id: str,
    period: Period,
    context: RequestContext,
    ttl: Optional[int] = None,
) -> Dict[str, Any]:
    """
    KPI payload (AggregatedKPI.to_dict) for a campaign and period.

    Source errors propagate unchanged and nothing is cached for them.
    """
    key = kpi_cache_key(context, campaign_id, period)
    resolution = resolve_period(period)

    async def compute() -> Dict[str, Any]:
        with Timer(f"kpi rows {campaign_id}/{resolution.bucket.value}", logger):
            rows = await source.fetch_metric_rows(campaign_id, resolution.bucket, context)

        payload = build_kpi(rows, period).to_dict()
        logger.info(
            f"KPI computed for campaign {campaign_id} ({period.value})",
            extra={
                "campaign_id": campaign_id,
                "period": period.value,
                "bucket": resolution.bucket.value,
                "rows": len(rows),
                "approximated": resolution.approximated,
            }
        )
        return payload

    return await cache.get_or_set(key, compute, ttl or KPI_CACHE_TTL)


async def invalidate_campaign_kpis(cache: RedisCache, context: RequestContext, campaign_id: str) -> int:
    """Drop every cached period of one campaign; returns the number of keys removed."""
    return await cache.invalidate_pattern(
        f"kpi:{context.customer_id or 'default'}:{campaign_id}:*"
    )
