"""Raw report rows and server-side KPI endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from core.cache import RedisCache
from core.models import RequestContext
from core.sources import MetricsSource
from web.schemas import ErrorResponse, KPIResponse, ReportResponse
from web.services import kpi_service
from ._deps import (
    RATE_LIMIT,
    get_cache,
    get_logger,
    get_request_context,
    get_source,
    limiter,
    validate_bucket,
    validate_campaign_id,
    validate_period,
)

router = APIRouter(
    prefix="/google-ads",
    tags=["reports"],
    responses={
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
logger = get_logger(__name__)


@router.get("/reports/{campaign_id}/{bucket}", response_model=ReportResponse)
@limiter.limit(RATE_LIMIT)
async def get_report(
    request: Request,
    campaign_id: str,
    bucket: str,
    context: RequestContext = Depends(get_request_context),
    source: MetricsSource = Depends(get_source),
):
    """
    Per-day metric rows for a campaign over a 7d or 30d bucket.

    Unknown campaigns yield an empty result list, not an error.
    """
    campaign_id = validate_campaign_id(campaign_id)
    resolved = validate_bucket(bucket)

    rows = await source.fetch_metric_rows(campaign_id, resolved, context)
    return {"results": [row.to_api() for row in rows]}


@router.get("/campaign/{campaign_id}/kpi", response_model=KPIResponse)
@limiter.limit(RATE_LIMIT)
async def get_campaign_kpi(
    request: Request,
    campaign_id: str,
    period: Optional[str] = Query("7j"),
    context: RequestContext = Depends(get_request_context),
    source: MetricsSource = Depends(get_source),
    cache: RedisCache = Depends(get_cache),
):
    """Aggregated KPIs for one campaign and dashboard period (30j, 14j, 7j, 3j, 24h)."""
    return await kpi_service.get_campaign_kpi(
        source,
        cache,
        validate_campaign_id(campaign_id),
        validate_period(period),
        context,
    )


@router.delete("/campaign/{campaign_id}/kpi")
@limiter.limit(RATE_LIMIT)
async def invalidate_campaign_kpi(
    request: Request,
    campaign_id: str,
    context: RequestContext = Depends(get_request_context),
    cache: RedisCache = Depends(get_cache),
):
    """Force the next KPI request for this campaign to recompute."""
    deleted = await kpi_service.invalidate_campaign_kpis(
        cache, context, validate_campaign_id(campaign_id)
    )
    logger.info(f"Invalidated {deleted} cached KPI entries for campaign {campaign_id}")
    return {"invalidated": deleted}
