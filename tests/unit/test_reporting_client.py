"""
Tests for core.reporting module.
"""
import asyncio

import httpx
import pytest

from core.exceptions import DEFAULT_ERROR_MESSAGE, UpstreamUnavailableError
from core.models import RequestContext
from core.reporting import ReportingClient

BASE_URL = "http://backend.test/api"


def _client(handler) -> ReportingClient:
    return ReportingClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestReportingClientSetup:
    """Tests for client construction and lifecycle."""

    def test_base_url_from_config_default(self):
        client = ReportingClient()
        assert client.base_url.endswith("/api")
        assert client.timeout == 10.0

    def test_default_headers_have_no_account(self):
        client = ReportingClient(base_url=BASE_URL)
        assert "X-Google-Ads-CID" not in client.headers

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with ReportingClient(base_url=BASE_URL) as client:
            assert client._client is not None
        assert client._client is None


class TestGetKpiByPeriod:
    """Tests for get_kpi_by_period."""

    @pytest.mark.asyncio
    async def test_aggregates_rows(self, scenario_a_results):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"results": scenario_a_results})

        async with _client(handler) as client:
            kpi = await client.get_kpi_by_period(
                "camp1", "7j", RequestContext(customer_id="1234567890")
            )

        assert requests[0].url.path == "/api/google-ads/reports/camp1/7d"
        assert requests[0].headers["X-Google-Ads-CID"] == "1234567890"
        assert kpi.impressions == 3000
        assert kpi.cost == 30.0
        assert kpi.ctr == pytest.approx(5.0)
        assert kpi.cpc == pytest.approx(0.2)
        assert kpi.roas == pytest.approx(20.0)
        assert kpi.approximated is False

    @pytest.mark.asyncio
    async def test_24h_uses_7d_bucket(self, scenario_a_results):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"results": scenario_a_results})

        async with _client(handler) as client:
            kpi = await client.get_kpi_by_period("camp1", "24h")

        assert paths == ["/api/google-ads/reports/camp1/7d"]
        assert kpi.period == "24h"
        assert kpi.bucket == "7d"
        assert kpi.approximated is True

    @pytest.mark.asyncio
    async def test_30j_uses_30d_bucket(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"results": []})

        async with _client(handler) as client:
            await client.get_kpi_by_period("camp1", "30j")

        assert paths == ["/api/google-ads/reports/camp1/30d"]

    @pytest.mark.asyncio
    async def test_empty_results_all_zero(self):
        async with _client(lambda r: httpx.Response(200, json={"results": []})) as client:
            kpi = await client.get_kpi_by_period("camp1", "7j")

        assert kpi.impressions == 0
        assert kpi.ctr == 0
        assert kpi.cpc == 0
        assert kpi.roas == 0

    @pytest.mark.asyncio
    async def test_bare_list_payload(self, scenario_a_results):
        async with _client(lambda r: httpx.Response(200, json=scenario_a_results)) as client:
            kpi = await client.get_kpi_by_period("camp1", "7j")
        assert kpi.clicks == 150

    @pytest.mark.asyncio
    async def test_pre_aggregated_payload_rederived(self):
        """Ratios in an aggregated payload are recomputed from its totals."""
        payload = {
            "impressions": 3000,
            "clicks": 150,
            "cost": 30,
            "conversions": 15,
            "conversionValue": 600,
            "ctr": 99.0,
            "cpc": 99.0,
        }
        async with _client(lambda r: httpx.Response(200, json=payload)) as client:
            kpi = await client.get_kpi_by_period("camp1", "14j")

        assert kpi.ctr == pytest.approx(5.0)
        assert kpi.cpc == pytest.approx(0.2)
        assert kpi.approximated is True

    @pytest.mark.asyncio
    async def test_error_body_is_not_zero_activity(self):
        async with _client(lambda r: httpx.Response(200, json={"error": "quota"})) as client:
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.get_kpi_by_period("camp1", "7j")

        assert exc_info.value.message == "quota"
        assert exc_info.value.status == 502

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"null", b"\"ok\"", b"42", b"{}", b'{"status": "done"}', b'{"results": "oops"}'])
    async def test_unreadable_body_raises(self, body):
        async with _client(lambda r: httpx.Response(200, content=body)) as client:
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.get_kpi_by_period("camp1", "7j")

        assert exc_info.value.message == DEFAULT_ERROR_MESSAGE
        assert exc_info.value.status == 502

    @pytest.mark.asyncio
    async def test_http_error_uses_backend_message(self):
        def handler(request):
            return httpx.Response(404, json={"error": "Campaign not found"})

        async with _client(handler) as client:
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.get_kpi_by_period("camp9", "7j")

        assert exc_info.value.message == "Campaign not found"
        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_http_error_without_message(self):
        async with _client(lambda r: httpx.Response(503, text="<html>down</html>")) as client:
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.get_kpi_by_period("camp1", "7j")

        assert exc_info.value.message == DEFAULT_ERROR_MESSAGE
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.get_kpi_by_period("camp1", "7j")

        assert exc_info.value.message == DEFAULT_ERROR_MESSAGE
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.get_kpi_by_period("camp1", "7j")

        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_not_retried(self):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(500, json={"error": "boom"})

        async with _client(handler) as client:
            with pytest.raises(UpstreamUnavailableError):
                await client.get_kpi_by_period("camp1", "7j")

        assert calls == 1

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        async with _client(lambda r: httpx.Response(200, text="not json")) as client:
            with pytest.raises(UpstreamUnavailableError):
                await client.get_kpi_by_period("camp1", "7j")

    @pytest.mark.asyncio
    async def test_concurrent_accounts_do_not_leak(self):
        """Each call carries its own account header on a shared client."""
        seen = []

        async def handler(request):
            await asyncio.sleep(0)
            seen.append((request.url.path, request.headers.get("X-Google-Ads-CID")))
            return httpx.Response(200, json={"results": []})

        async with _client(handler) as client:
            await asyncio.gather(
                client.get_kpi_by_period("camp1", "7j", RequestContext(customer_id="1111111111")),
                client.get_kpi_by_period("camp2", "7j", RequestContext(customer_id="2222222222")),
            )
            assert "X-Google-Ads-CID" not in client._client.headers

        assert sorted(seen) == [
            ("/api/google-ads/reports/camp1/7d", "1111111111"),
            ("/api/google-ads/reports/camp2/7d", "2222222222"),
        ]


class TestCampaigns:
    """Tests for campaign calls."""

    @pytest.mark.asyncio
    async def test_transformed_list(self):
        payload = [{"id": "camp1", "name": "PMax", "type": "PERFORMANCE_MAX", "status": "ENABLED"}]
        async with _client(lambda r: httpx.Response(200, json=payload)) as client:
            campaigns = await client.get_all_campaigns()

        assert campaigns[0].id == "camp1"
        assert campaigns[0].is_performance_max

    @pytest.mark.asyncio
    async def test_raw_results(self, sample_campaign_item):
        payload = {"results": [sample_campaign_item]}
        async with _client(lambda r: httpx.Response(200, json=payload)) as client:
            campaigns = await client.get_all_campaigns()

        assert campaigns[0].id == "111"
        assert campaigns[0].type == "SEARCH"

    @pytest.mark.asyncio
    async def test_campaign_details(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"id": "camp1", "name": "PMax"})

        async with _client(handler) as client:
            details = await client.get_campaign_details("camp1")

        assert paths == ["/api/google-ads/campaigns/camp1"]
        assert details["name"] == "PMax"
