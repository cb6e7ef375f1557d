"""Campaign listing and detail endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request

from core.models import RequestContext
from core.sources import MetricsSource
from web.schemas import CampaignResponse, ErrorResponse
from ._deps import (
    RATE_LIMIT,
    get_logger,
    get_request_context,
    get_source,
    limiter,
    validate_campaign_id,
)

router = APIRouter(
    prefix="/google-ads",
    tags=["campaigns"],
    responses={
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
logger = get_logger(__name__)


@router.get("/campaigns", response_model=List[CampaignResponse])
@limiter.limit(RATE_LIMIT)
async def list_campaigns(
    request: Request,
    context: RequestContext = Depends(get_request_context),
    source: MetricsSource = Depends(get_source),
):
    """All campaigns of the account named by X-Google-Ads-CID."""
    campaigns = await source.list_campaigns(context)
    logger.debug(
        f"Listed {len(campaigns)} campaigns",
        extra={"customer_id": context.customer_id, "source": source.name}
    )
    return [c.to_dict() for c in campaigns]


@router.get(
    "/campaigns/{campaign_id}",
    response_model=CampaignResponse,
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMIT)
async def get_campaign(
    request: Request,
    campaign_id: str,
    context: RequestContext = Depends(get_request_context),
    source: MetricsSource = Depends(get_source),
):
    """One campaign; 404 when the account has no such campaign."""
    campaign = await source.get_campaign(validate_campaign_id(campaign_id), context)
    return campaign.to_dict()
