"""
Metric aggregation and KPI derivation.

Rows are summed first and every ratio is computed from the sums
(ctr = sum(clicks) / sum(impressions)), never by averaging per-day ratios.
A zero denominator yields 0 for that ratio.
YouTube engagement counters are summed only across rows that report them.

Upstream average_cpc / average_cpv values are not used: per-row averages
cannot be combined without weights, so CPC and CPV always come from the
aggregated cost divided by aggregated clicks or views.
"""
from typing import Any, Dict, Iterable, Optional, Union

from core.models import AggregatedKPI, MetricRow, MetricTotals, Period, YouTubeEngagement
from core.periods import resolve_period

RowLike = Union[MetricRow, Dict[str, Any]]


def _ratio(numerator: float, denominator: float) -> float:
    if denominator > 0:
        return numerator / denominator
    return 0.0


def aggregate_metrics(rows: Iterable[RowLike]) -> MetricTotals:
    """
    Sum metric rows into totals.

    Order of rows is irrelevant. Raw result dicts are parsed with
    MetricRow.from_api. An empty input gives all-zero totals.
    """
    impressions = clicks = cost_micros = views = 0
    conversions = conversion_value = 0.0
    youtube: Optional[YouTubeEngagement] = None

    for row in rows:
        if not isinstance(row, MetricRow):
            row = MetricRow.from_api(row)
        impressions += row.impressions
        clicks += row.clicks
        cost_micros += row.cost_micros
        conversions += row.conversions
        conversion_value += row.conversion_value
        views += row.video_views or 0
        if row.youtube is not None:
            youtube = row.youtube if youtube is None else youtube + row.youtube

    return MetricTotals(
        impressions=impressions,
        clicks=clicks,
        cost_micros=cost_micros,
        conversions=conversions,
        conversion_value=conversion_value,
        views=views,
        youtube=youtube,
    )


def derive_kpis(
    totals: MetricTotals,
    period: Union[Period, str],
    bucket: Optional[str] = None,
    approximated: bool = False,
) -> AggregatedKPI:
    """Compute ratio KPIs from aggregated totals."""
    cost = totals.cost_units
    period_label = period.value if isinstance(period, Period) else period
    bucket_label = getattr(bucket, "value", bucket)

    return AggregatedKPI(
        impressions=totals.impressions,
        clicks=totals.clicks,
        cost=cost,
        conversions=totals.conversions,
        conversion_value=totals.conversion_value,
        views=totals.views,
        ctr=_ratio(totals.clicks, totals.impressions) * 100,
        cpc=_ratio(cost, totals.clicks),
        cpv=_ratio(cost, totals.views),
        roas=_ratio(totals.conversion_value, cost),
        conversion_rate=_ratio(totals.conversions, totals.clicks) * 100,
        cost_per_conversion=_ratio(cost, totals.conversions),
        view_rate=_ratio(totals.views, totals.impressions) * 100,
        period=period_label,
        bucket=bucket_label,
        approximated=approximated,
        youtube=totals.youtube,
    )


def build_kpi(rows: Iterable[RowLike], period: Union[Period, str]) -> AggregatedKPI:
    """Aggregate rows for a period and derive its KPIs."""
    resolution = resolve_period(period)
    return derive_kpis(
        aggregate_metrics(rows),
        resolution.period,
        bucket=resolution.bucket,
        approximated=resolution.approximated,
    )
