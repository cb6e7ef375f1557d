"""
Reporting client for the backend proxy.

Fetches raw per-day metric rows for a campaign and period, then folds
them into KPIs locally. Account selection is explicit per call through
RequestContext; the shared httpx client's default headers never change.

Failures are normalized to UpstreamUnavailableError(message, status) and
are not retried here. Concurrent calls for the same campaign and period
each perform their own fetch.
"""
from typing import Any, Dict, List, Optional, Union

import httpx

from core.aggregation import build_kpi, derive_kpis
from core.config import APIConfig
from core.exceptions import DEFAULT_ERROR_MESSAGE, UpstreamUnavailableError
from core.models import AggregatedKPI, Campaign, MetricTotals, Period, RequestContext
from core.observability import Timer, get_correlation_id, get_logger
from core.periods import resolve_period

logger = get_logger(__name__)

# Keys that mark a body as pre-aggregated totals
SUMMARY_KEYS = frozenset({
    "impressions", "clicks", "cost", "costUnits", "cost_units", "costMicros", "cost_micros",
    "conversions", "conversionValue", "conversion_value", "conversions_value",
    "views", "videoViews", "video_views",
})


def _error_message(response: httpx.Response) -> str:
    """Backend error text from a {"error": ...} body, or the generic fallback."""
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return DEFAULT_ERROR_MESSAGE


class ReportingClient:
    """
    Async client for the dashboard's reporting calls.

    Usage:
        async with ReportingClient() as client:
            kpi = await client.get_kpi_by_period(
                "camp1", "7j", RequestContext(customer_id="1234567890")
            )
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        api_config: Optional[APIConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        api_config = api_config or APIConfig()
        self.base_url = (base_url or api_config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else api_config.request_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ReportingClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get(self, path: str, context: Optional[RequestContext] = None) -> Any:
        """GET a backend path and return decoded JSON, normalizing every failure."""
        if not self._client:
            await self.connect()

        context = context or RequestContext()
        request_headers = context.headers()
        if "X-Request-ID" not in request_headers and get_correlation_id():
            request_headers["X-Request-ID"] = get_correlation_id()

        try:
            with Timer(f"backend GET {path}", logger):
                response = await self._client.get(path, headers=request_headers)
        except httpx.HTTPError as e:
            logger.error(
                f"Backend request failed: GET {path} - {e}",
                extra={"path": path, "error": str(e)}
            )
            raise UpstreamUnavailableError(status=500, details=str(e)) from e

        if response.status_code >= 400:
            error = UpstreamUnavailableError(
                _error_message(response),
                status=response.status_code,
                details=response.text[:500],
            )
            logger.error(
                f"Backend error {response.status_code}: {error.message}",
                extra={"path": path, "status_code": response.status_code}
            )
            raise error

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Backend returned non-JSON body for GET {path}")
            raise UpstreamUnavailableError(status=response.status_code, details="invalid JSON") from e

    # ═══════════════════════════════════════════════════════════════════════════
    # CAMPAIGNS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_all_campaigns(self, context: Optional[RequestContext] = None) -> List[Campaign]:
        """All campaigns, whether the backend sends raw `results` or a transformed list."""
        data = await self._get("/google-ads/campaigns", context)

        if isinstance(data, dict):
            items = data.get("results") or []
        else:
            items = data or []

        return [Campaign.from_api(item) for item in items if isinstance(item, dict)]

    async def get_campaign_details(
        self,
        campaign_id: str,
        context: Optional[RequestContext] = None,
    ) -> Dict[str, Any]:
        return await self._get(f"/google-ads/campaigns/{campaign_id}", context)

    # ═══════════════════════════════════════════════════════════════════════════
    # KPI
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_kpi_by_period(
        self,
        campaign_id: str,
        period: Union[Period, str],
        context: Optional[RequestContext] = None,
    ) -> AggregatedKPI:
        """
        KPIs for a campaign over a dashboard period.

        The period is first mapped to an upstream bucket; periods served
        by a wider or narrower bucket come back with approximated=True.

        Raises:
            UpstreamUnavailableError: The metrics fetch failed
        """
        resolution = resolve_period(period)
        data = await self._get(
            f"/google-ads/reports/{campaign_id}/{resolution.bucket.value}",
            context,
        )

        if isinstance(data, dict) and "results" in data:
            rows = data.get("results") or []
            if not isinstance(rows, list):
                raise UpstreamUnavailableError(DEFAULT_ERROR_MESSAGE, status=502)
            logger.debug(
                f"Aggregating {len(rows)} rows for campaign {campaign_id}",
                extra={"campaign_id": campaign_id, "bucket": resolution.bucket.value}
            )
            return build_kpi(rows, resolution.period)

        if isinstance(data, list):
            return build_kpi(data, resolution.period)

        if not isinstance(data, dict) or not SUMMARY_KEYS.intersection(data):
            # A body with nothing to count is a failed load, not zero activity
            message = DEFAULT_ERROR_MESSAGE
            if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
                message = data["error"]
            logger.warning(
                f"Unreadable metrics payload for campaign {campaign_id}",
                extra={"campaign_id": campaign_id, "payload_type": type(data).__name__}
            )
            raise UpstreamUnavailableError(message, status=502)

        # Backend already aggregated: re-derive ratios from its totals
        totals = MetricTotals.from_summary(data)
        return derive_kpis(
            totals,
            resolution.period,
            bucket=resolution.bucket,
            approximated=resolution.approximated,
        )
