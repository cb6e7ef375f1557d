"""
Pydantic response models for API endpoints.

Provides type-safe response models with automatic validation and documentation.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════════════════════════════
# COMMON MODELS
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""
    error: str = Field(description="Human readable error message")
    detail: Optional[Any] = Field(None, description="Extra context (field, upstream text)")


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════════

class CacheStatus(BaseModel):
    """Redis cache status."""
    enabled: bool
    connected: bool
    url: Optional[str] = None
    hits: int = 0
    misses: int = 0
    errors: int = 0
    sets: int = 0
    invalidations: int = 0
    hit_rate_percent: float = 0.0


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status: healthy or degraded")
    version: str = Field(description="Application version")
    uptime_seconds: int = Field(description="Uptime in seconds")
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")
    source: str = Field(description="Active metrics source: mock or live")
    cache: CacheStatus


class MetricsResponse(BaseModel):
    """In-process request metrics."""
    uptime_seconds: int
    correlation_id: Optional[str] = None
    requests: Dict[str, int] = Field(default_factory=dict)
    errors: Dict[str, int] = Field(default_factory=dict)
    timing: Dict[str, Dict[str, float]] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# CAMPAIGNS
# ═══════════════════════════════════════════════════════════════════════════════

class CampaignResponse(BaseModel):
    """Campaign summary as shown in the campaign selector."""
    id: str
    name: str
    status: str
    type: Optional[str] = None
    biddingStrategy: Optional[str] = None
    isPerformanceMax: bool = False
    isVideo: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# REPORTS
# ═══════════════════════════════════════════════════════════════════════════════

class ReportMetrics(BaseModel):
    """Raw metrics of one report row (Google Ads field names)."""
    impressions: int = 0
    clicks: int = 0
    cost_micros: int = 0
    conversions: float = 0.0
    conversions_value: float = 0.0
    average_cpc: Optional[int] = None
    average_cpv: Optional[int] = None
    video_views: Optional[int] = None
    youtube_views: Optional[int] = None
    youtube_likes: Optional[int] = None
    youtube_subscribers: Optional[int] = None
    youtube_playlist_adds: Optional[int] = None


class ReportSegments(BaseModel):
    date: Optional[str] = None


class ReportRow(BaseModel):
    metrics: ReportMetrics
    segments: Optional[ReportSegments] = None


class ReportResponse(BaseModel):
    """Raw rows for one (campaign, bucket) pair."""
    results: List[ReportRow] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# KPI
# ═══════════════════════════════════════════════════════════════════════════════

class KPIResponse(BaseModel):
    """Aggregated KPIs for a campaign over a dashboard period."""
    impressions: int = Field(description="Total impressions")
    clicks: int = Field(description="Total clicks")
    cost: float = Field(description="Total cost in account currency")
    conversions: float = Field(description="Total conversions")
    conversionValue: float = Field(description="Total conversion value")
    views: int = Field(description="Total video views")
    ctr: float = Field(description="Click-through rate in percent")
    cpc: float = Field(description="Cost per click")
    cpv: float = Field(description="Cost per view")
    roas: float = Field(description="Return on ad spend (value / cost)")
    conversionRate: float = Field(description="Conversions per click in percent")
    costPerConversion: float = Field(description="Cost per conversion")
    viewRate: float = Field(description="Views per impression in percent")
    period: str = Field(description="Requested period token")
    bucket: Optional[str] = Field(None, description="Upstream bucket that served the period")
    approximated: bool = Field(
        False, description="True when the bucket covers a different window than the period"
    )
    youtubeViews: Optional[int] = Field(None, description="YouTube views (video campaigns only)")
    youtubeLikes: Optional[int] = Field(None, description="YouTube likes (video campaigns only)")
    youtubeSubscribers: Optional[int] = Field(None, description="Subscribers gained (video campaigns only)")
    youtubePlaylistAdds: Optional[int] = Field(None, description="Playlist additions (video campaigns only)")
