"""
Metrics sources behind the backend proxy.

`MetricsSource` is the capability the proxy routes depend on. Two
implementations are selected by configuration (ADS_SOURCE):

- MockSource: development campaigns with seeded, repeatable daily rows
- LiveSource: GAQL queries against the Google Ads REST API
"""
import asyncio
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional

from core.config import AdsConfig
from core.exceptions import AdsAPIError, ValidationError
from core.google_ads import GoogleAdsClient
from core.models import (
    MICROS_PER_UNIT,
    Bucket,
    Campaign,
    CampaignType,
    MetricRow,
    RequestContext,
    YouTubeEngagement,
)
from core.observability import get_logger
from core.validators import validate_customer_id

logger = get_logger(__name__)


class MetricsSource(ABC):
    """Where campaigns and raw per-day metric rows come from."""

    name: str = "abstract"

    @abstractmethod
    async def list_campaigns(self, context: RequestContext) -> List[Campaign]:
        """All non-removed campaigns of the account in context."""

    @abstractmethod
    async def get_campaign(self, campaign_id: str, context: RequestContext) -> Campaign:
        """
        One campaign.

        Raises:
            AdsAPIError: status_code 404 when the campaign does not exist
        """

    @abstractmethod
    async def fetch_metric_rows(
        self,
        campaign_id: str,
        bucket: Bucket,
        context: RequestContext,
    ) -> List[MetricRow]:
        """Raw rows for a (campaign, bucket) pair; an empty list is a valid answer."""

    async def close(self) -> None:
        """Release any held connections."""


# ═══════════════════════════════════════════════════════════════════════════════
# MOCK SOURCE
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class _VolumeProfile:
    """30-day volumes a mock campaign's daily rows are drawn around."""
    impressions: int
    clicks: int
    cost: float
    conversions: float
    conversion_value: float
    views: int = 0
    youtube: Optional[YouTubeEngagement] = None


MOCK_CAMPAIGNS = [
    Campaign("camp1", "Campagne Performance Max - Musique Pop", "ENABLED",
             CampaignType.PERFORMANCE_MAX.value, "MAXIMIZE_CONVERSION_VALUE"),
    Campaign("camp2", "Campagne Vidéo - Clips Officiels", "ENABLED",
             CampaignType.VIDEO.value, "TARGET_CPV"),
    Campaign("camp3", "Campagne Display - Artistes Émergents", "ENABLED",
             CampaignType.DISPLAY.value, "MAXIMIZE_CONVERSIONS"),
    Campaign("camp4", "Campagne Search - Titres Albums", "ENABLED",
             CampaignType.SEARCH.value, "TARGET_CPA"),
]

MOCK_PROFILES: Dict[str, _VolumeProfile] = {
    CampaignType.PERFORMANCE_MAX.value: _VolumeProfile(
        impressions=120000, clicks=8760, cost=4500, conversions=921, conversion_value=14400,
    ),
    CampaignType.VIDEO.value: _VolumeProfile(
        impressions=250000, clicks=13000, cost=3200, conversions=450, conversion_value=8960,
        views=180000,
        youtube=YouTubeEngagement(views=160000, likes=19200, subscribers=3600, playlist_adds=5400),
    ),
}
DEFAULT_PROFILE = _VolumeProfile(
    impressions=85000, clicks=4200, cost=2800, conversions=320, conversion_value=6720,
)


class MockSource(MetricsSource):
    """
    In-process development data.

    Rows are drawn from a Random seeded with (campaign, bucket), so the
    same request always returns the same numbers. Unknown campaigns have
    no rows.
    """

    name = "mock"

    def __init__(self, latency_ms: int = 0, campaigns: Optional[List[Campaign]] = None):
        self.latency_ms = latency_ms
        self._campaigns = {c.id: c for c in (campaigns or MOCK_CAMPAIGNS)}

    async def _simulate_latency(self) -> None:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)

    async def list_campaigns(self, context: RequestContext) -> List[Campaign]:
        await self._simulate_latency()
        return list(self._campaigns.values())

    async def get_campaign(self, campaign_id: str, context: RequestContext) -> Campaign:
        await self._simulate_latency()
        campaign = self._campaigns.get(campaign_id)
        if campaign is None:
            raise AdsAPIError(
                f"Campaign {campaign_id} not found",
                status_code=404,
                error_code="CAMPAIGN_NOT_FOUND",
            )
        return campaign

    async def fetch_metric_rows(
        self,
        campaign_id: str,
        bucket: Bucket,
        context: RequestContext,
    ) -> List[MetricRow]:
        await self._simulate_latency()
        campaign = self._campaigns.get(campaign_id)
        if campaign is None:
            return []

        profile = MOCK_PROFILES.get(campaign.type, DEFAULT_PROFILE)
        return generate_daily_rows(profile, f"{campaign_id}:{bucket.value}", bucket.days)


def generate_daily_rows(
    profile: _VolumeProfile,
    seed: str,
    days: int,
    end: Optional[date] = None,
) -> List[MetricRow]:
    """Draw `days` daily rows ending yesterday around a profile's daily average."""
    rng = random.Random(seed)
    end = end or date.today() - timedelta(days=1)
    rows = []

    for offset in range(days - 1, -1, -1):
        factor = rng.uniform(0.8, 1.2)
        impressions = round(profile.impressions / 30 * factor)
        clicks = min(impressions, round(profile.clicks / 30 * factor * rng.uniform(0.9, 1.1)))
        cost_micros = round(profile.cost / 30 * factor * MICROS_PER_UNIT)
        views = round(profile.views / 30 * factor) if profile.views else None
        youtube = None
        if profile.youtube is not None:
            youtube = YouTubeEngagement(
                views=round(profile.youtube.views / 30 * factor),
                likes=round(profile.youtube.likes / 30 * factor),
                subscribers=round(profile.youtube.subscribers / 30 * factor),
                playlist_adds=round(profile.youtube.playlist_adds / 30 * factor),
            )

        rows.append(MetricRow(
            impressions=impressions,
            clicks=clicks,
            cost_micros=cost_micros,
            conversions=round(profile.conversions / 30 * factor, 2),
            conversion_value=round(profile.conversion_value / 30 * factor, 2),
            average_cpc=cost_micros // clicks if clicks else None,
            average_cpv=cost_micros // views if views else None,
            video_views=views,
            youtube=youtube,
            date=(end - timedelta(days=offset)).isoformat(),
        ))

    return rows


# ═══════════════════════════════════════════════════════════════════════════════
# LIVE SOURCE
# ═══════════════════════════════════════════════════════════════════════════════

CAMPAIGN_FIELDS = (
    "campaign.id, campaign.name, campaign.status, "
    "campaign.advertising_channel_type, campaign.bidding_strategy_type"
)

METRIC_FIELDS = (
    "segments.date, metrics.impressions, metrics.clicks, metrics.cost_micros, "
    "metrics.conversions, metrics.conversions_value, metrics.average_cpc, "
    "metrics.average_cpv, metrics.video_views"
)


def _numeric_campaign_id(campaign_id: str) -> str:
    # Ids are interpolated into GAQL, so only digits get through
    if not campaign_id.isdigit():
        raise ValidationError("campaign_id", "Google Ads campaign IDs are numeric", campaign_id)
    return campaign_id


class LiveSource(MetricsSource):
    """Google Ads API backed source."""

    name = "live"

    def __init__(self, client: GoogleAdsClient, default_customer_id: str):
        self.client = client
        self.default_customer_id = default_customer_id

    def _customer_id(self, context: RequestContext) -> str:
        return validate_customer_id(
            context.customer_id or self.default_customer_id,
            allow_none=False,
        )

    async def list_campaigns(self, context: RequestContext) -> List[Campaign]:
        query = (
            f"SELECT {CAMPAIGN_FIELDS} FROM campaign "
            "WHERE campaign.status != 'REMOVED' ORDER BY campaign.name"
        )
        results = await self.client.search(self._customer_id(context), query)
        return [Campaign.from_api(item) for item in results]

    async def get_campaign(self, campaign_id: str, context: RequestContext) -> Campaign:
        query = (
            f"SELECT {CAMPAIGN_FIELDS} FROM campaign "
            f"WHERE campaign.id = {_numeric_campaign_id(campaign_id)}"
        )
        results = await self.client.search(self._customer_id(context), query)
        if not results:
            raise AdsAPIError(
                f"Campaign {campaign_id} not found",
                status_code=404,
                error_code="CAMPAIGN_NOT_FOUND",
            )
        return Campaign.from_api(results[0])

    async def fetch_metric_rows(
        self,
        campaign_id: str,
        bucket: Bucket,
        context: RequestContext,
    ) -> List[MetricRow]:
        query = (
            f"SELECT {METRIC_FIELDS} FROM campaign "
            f"WHERE campaign.id = {_numeric_campaign_id(campaign_id)} "
            f"AND segments.date DURING {bucket.gaql_range}"
        )
        results = await self.client.search(self._customer_id(context), query)
        return [MetricRow.from_api(item) for item in results]

    async def close(self) -> None:
        await self.client.close()


def build_source(ads_config: AdsConfig) -> MetricsSource:
    """Create the metrics source selected by configuration."""
    if ads_config.is_live:
        logger.info("Using live Google Ads metrics source")
        return LiveSource(
            GoogleAdsClient.from_config(ads_config),
            default_customer_id=ads_config.default_customer_id,
        )

    logger.info("Using mock metrics source", extra={"latency_ms": ads_config.mock_latency_ms})
    return MockSource(latency_ms=ads_config.mock_latency_ms)
