"""
Core shared library for the Ads KPI dashboard.

This package contains the logic shared by the web/ proxy and scripts/:
- exceptions: Custom exception hierarchy
- validators: Input validation functions
- periods: Dashboard period to upstream bucket resolution
- aggregation: Metric folding and KPI derivation
- config: Centralized configuration
"""

# Import in dependency order
from core.exceptions import (
    AdsError,
    AdsConnectionError,
    AdsAPIError,
    AdsDataError,
    UpstreamUnavailableError,
    ValidationError,
)

from core.validators import (
    validate_period,
    validate_bucket,
    validate_campaign_id,
    validate_customer_id,
)

from core.models import (
    AggregatedKPI,
    Bucket,
    Campaign,
    MetricRow,
    MetricTotals,
    Period,
    RequestContext,
    YouTubeEngagement,
)

from core.periods import resolve_bucket, resolve_period, parse_period

from core.aggregation import aggregate_metrics, derive_kpis, build_kpi

from core.config import config

__all__ = [
    # Exceptions
    "AdsError",
    "AdsConnectionError",
    "AdsAPIError",
    "AdsDataError",
    "UpstreamUnavailableError",
    "ValidationError",
    # Validators
    "validate_period",
    "validate_bucket",
    "validate_campaign_id",
    "validate_customer_id",
    # Models
    "AggregatedKPI",
    "Bucket",
    "Campaign",
    "MetricRow",
    "MetricTotals",
    "Period",
    "RequestContext",
    "YouTubeEngagement",
    # Periods
    "resolve_bucket",
    "resolve_period",
    "parse_period",
    # Aggregation
    "aggregate_metrics",
    "derive_kpis",
    "build_kpi",
    # Config
    "config",
]
