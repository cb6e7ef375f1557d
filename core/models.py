"""
Domain models for ads reporting data.

Type-safe dataclasses for campaigns, raw metric rows, aggregated totals
and derived KPIs. Both the backend proxy and the reporting client build
on these, so payload parsing lives here in one place.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

MICROS_PER_UNIT = 1_000_000


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class Period(str, Enum):
    """Reporting windows offered by the dashboard."""
    DAYS_30 = "30j"
    DAYS_14 = "14j"
    DAYS_7 = "7j"
    DAYS_3 = "3j"
    HOURS_24 = "24h"

    @property
    def days(self) -> int:
        """Window length in days."""
        return {
            Period.DAYS_30: 30,
            Period.DAYS_14: 14,
            Period.DAYS_7: 7,
            Period.DAYS_3: 3,
            Period.HOURS_24: 1,
        }[self]


class Bucket(str, Enum):
    """Reporting granularities the upstream metrics query supports."""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"

    @property
    def days(self) -> int:
        return 7 if self is Bucket.LAST_7_DAYS else 30

    @property
    def gaql_range(self) -> str:
        """Predefined GAQL date range for this bucket."""
        return "LAST_7_DAYS" if self is Bucket.LAST_7_DAYS else "LAST_30_DAYS"


class CampaignType(str, Enum):
    """Google Ads advertising channel types shown in the dashboard."""
    SEARCH = "SEARCH"
    DISPLAY = "DISPLAY"
    VIDEO = "VIDEO"
    PERFORMANCE_MAX = "PERFORMANCE_MAX"


# ═══════════════════════════════════════════════════════════════════════════════
# PARSING HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _pick(data: Dict[str, Any], *keys: str) -> Any:
    """First non-None value among keys (snake_case and camelCase spellings)."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _to_int(value: Any) -> int:
    """Coerce an API number (int, float or numeric string) to int; 0 if unusable."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        # "12.0", "1e3" and the like; non-finite numbers come back as 0.0
        return int(_to_float(value))


def _to_float(value: Any) -> float:
    """Coerce an API number to float; 0.0 if missing or unusable."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN and infinities would poison every sum they touch
    if not math.isfinite(number):
        return 0.0
    return number


def _to_optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return _to_int(value)


# ═══════════════════════════════════════════════════════════════════════════════
# DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RequestContext:
    """
    Per-call request settings.

    The advertiser account travels with each call instead of being
    written into a shared client's default headers.
    """
    customer_id: Optional[str] = None
    correlation_id: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        """HTTP headers carrying this context."""
        headers = {}
        if self.customer_id:
            headers["X-Google-Ads-CID"] = self.customer_id
        if self.correlation_id:
            headers["X-Request-ID"] = self.correlation_id
        return headers


@dataclass(frozen=True)
class YouTubeEngagement:
    """
    Additive YouTube engagement counters of a video campaign.

    Rows without any engagement field parse to None, so campaigns that
    never report engagement carry no block at all instead of zeros.
    """
    views: int = 0
    likes: int = 0
    subscribers: int = 0
    playlist_adds: int = 0

    _FIELDS = {
        "views": ("youtube_views", "youtubeViews"),
        "likes": ("youtube_likes", "youtubeLikes"),
        "subscribers": ("youtube_subscribers", "youtubeSubscribers"),
        "playlist_adds": ("youtube_playlist_adds", "youtubePlaylistAdds"),
    }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["YouTubeEngagement"]:
        values = {name: _pick(data, *keys) for name, keys in cls._FIELDS.items()}
        if all(value is None for value in values.values()):
            return None
        return cls(**{name: _to_int(value) for name, value in values.items()})

    def __add__(self, other: "YouTubeEngagement") -> "YouTubeEngagement":
        return YouTubeEngagement(
            views=self.views + other.views,
            likes=self.likes + other.likes,
            subscribers=self.subscribers + other.subscribers,
            playlist_adds=self.playlist_adds + other.playlist_adds,
        )

    def to_api(self) -> Dict[str, int]:
        """snake_case metric fields, as in a report row."""
        return {snake: getattr(self, name) for name, (snake, _) in self._FIELDS.items()}

    def to_dict(self) -> Dict[str, int]:
        """camelCase fields merged into the KPI payload."""
        return {camel: getattr(self, name) for name, (_, camel) in self._FIELDS.items()}


@dataclass(frozen=True)
class MetricRow:
    """One reporting bucket (usually one day) of raw campaign measurements."""
    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    conversions: float = 0.0
    conversion_value: float = 0.0
    average_cpc: Optional[int] = None  # micros
    average_cpv: Optional[int] = None  # micros
    video_views: Optional[int] = None
    youtube: Optional[YouTubeEngagement] = None
    date: Optional[str] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "MetricRow":
        """
        Build a row from an upstream result item.

        Accepts `{"metrics": {...}, "segments": {...}}` items as well as a
        bare metrics dict, in snake_case or the REST API's camelCase.
        Missing or unreadable numbers become 0 so one bad row cannot
        poison an aggregate.
        """
        if not isinstance(data, dict):
            return cls()

        metrics = data.get("metrics")
        if not isinstance(metrics, dict):
            metrics = data
        segments = data.get("segments") if isinstance(data.get("segments"), dict) else {}

        return cls(
            impressions=_to_int(metrics.get("impressions")),
            clicks=_to_int(metrics.get("clicks")),
            cost_micros=_to_int(_pick(metrics, "cost_micros", "costMicros")),
            conversions=_to_float(metrics.get("conversions")),
            conversion_value=_to_float(_pick(metrics, "conversions_value", "conversionsValue")),
            average_cpc=_to_optional_int(_pick(metrics, "average_cpc", "averageCpc")),
            average_cpv=_to_optional_int(_pick(metrics, "average_cpv", "averageCpv")),
            video_views=_to_optional_int(_pick(metrics, "video_views", "videoViews")),
            youtube=YouTubeEngagement.from_api(metrics),
            date=segments.get("date") or data.get("date"),
        )

    def to_api(self) -> Dict[str, Any]:
        """Render as a Google Ads style result item (snake_case metrics)."""
        metrics: Dict[str, Any] = {
            "impressions": self.impressions,
            "clicks": self.clicks,
            "cost_micros": self.cost_micros,
            "conversions": self.conversions,
            "conversions_value": self.conversion_value,
        }
        if self.average_cpc is not None:
            metrics["average_cpc"] = self.average_cpc
        if self.average_cpv is not None:
            metrics["average_cpv"] = self.average_cpv
        if self.video_views is not None:
            metrics["video_views"] = self.video_views
        if self.youtube is not None:
            metrics.update(self.youtube.to_api())

        item: Dict[str, Any] = {"metrics": metrics}
        if self.date:
            item["segments"] = {"date": self.date}
        return item


@dataclass(frozen=True)
class MetricTotals:
    """Additive fold of metric rows."""
    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    conversions: float = 0.0
    conversion_value: float = 0.0
    views: int = 0
    youtube: Optional[YouTubeEngagement] = None

    @property
    def cost_units(self) -> float:
        """Total cost in currency units (micros summed first, divided once)."""
        return self.cost_micros / MICROS_PER_UNIT

    @classmethod
    def from_summary(cls, data: Dict[str, Any]) -> "MetricTotals":
        """
        Read totals from an already aggregated payload.

        Cost may arrive in currency units (`cost`, `costUnits`) or micros
        (`costMicros`, `cost_micros`).
        """
        cost_micros = _pick(data, "costMicros", "cost_micros")
        if cost_micros is not None:
            micros = _to_int(cost_micros)
        else:
            units = _to_float(_pick(data, "cost", "costUnits", "cost_units")) * MICROS_PER_UNIT
            micros = round(units) if math.isfinite(units) else 0

        return cls(
            impressions=_to_int(data.get("impressions")),
            clicks=_to_int(data.get("clicks")),
            cost_micros=micros,
            conversions=_to_float(data.get("conversions")),
            conversion_value=_to_float(_pick(data, "conversionValue", "conversion_value", "conversions_value")),
            views=_to_int(_pick(data, "views", "videoViews", "video_views")),
            youtube=YouTubeEngagement.from_api(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "impressions": self.impressions,
            "clicks": self.clicks,
            "costUnits": self.cost_units,
            "conversions": self.conversions,
            "conversionValue": self.conversion_value,
            "views": self.views,
        }
        if self.youtube is not None:
            data.update(self.youtube.to_dict())
        return data


@dataclass(frozen=True)
class AggregatedKPI:
    """Totals for one (campaign, period) request plus ratios derived from them."""
    impressions: int
    clicks: int
    cost: float
    conversions: float
    conversion_value: float
    views: int
    ctr: float
    cpc: float
    cpv: float
    roas: float
    conversion_rate: float
    cost_per_conversion: float
    view_rate: float
    period: str
    bucket: Optional[str] = None
    approximated: bool = False
    youtube: Optional[YouTubeEngagement] = None

    def to_dict(self) -> Dict[str, Any]:
        """camelCase payload consumed by the dashboard UI."""
        data = {
            "impressions": self.impressions,
            "clicks": self.clicks,
            "cost": self.cost,
            "conversions": self.conversions,
            "conversionValue": self.conversion_value,
            "views": self.views,
            "ctr": self.ctr,
            "cpc": self.cpc,
            "cpv": self.cpv,
            "roas": self.roas,
            "conversionRate": self.conversion_rate,
            "costPerConversion": self.cost_per_conversion,
            "viewRate": self.view_rate,
            "period": self.period,
            "bucket": self.bucket,
            "approximated": self.approximated,
        }
        if self.youtube is not None:
            data.update(self.youtube.to_dict())
        return data


@dataclass
class Campaign:
    """Google Ads campaign summary."""
    id: str
    name: str
    status: str = "ENABLED"
    type: Optional[str] = None
    bidding_strategy: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Campaign":
        """
        Create Campaign from an API item.

        Handles the Google Ads result shape (`{"campaign": {...}}`) and the
        already transformed shape the backend proxy returns.
        """
        campaign = data.get("campaign") if isinstance(data.get("campaign"), dict) else data
        return cls(
            id=str(campaign.get("id", "")),
            name=campaign.get("name", ""),
            status=campaign.get("status") or "ENABLED",
            type=_pick(campaign, "advertisingChannelType", "advertising_channel_type", "type"),
            bidding_strategy=_pick(
                campaign, "biddingStrategyType", "bidding_strategy_type", "biddingStrategy"
            ),
        )

    @property
    def is_performance_max(self) -> bool:
        return self.type == CampaignType.PERFORMANCE_MAX.value

    @property
    def is_video(self) -> bool:
        return self.type == CampaignType.VIDEO.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "type": self.type,
            "biddingStrategy": self.bidding_strategy,
            "isPerformanceMax": self.is_performance_max,
            "isVideo": self.is_video,
        }
