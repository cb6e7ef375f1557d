"""
Async HTTP client for the Google Ads REST API.

Runs GAQL queries through `customers/{id}/googleAds:search`.

Features:
- Connection pooling with httpx
- Exponential backoff retry (3 attempts) on connection errors
- Circuit breaker (opens after 5 failures, 60s recovery)
- Request correlation IDs forwarded as X-Request-ID
- Customer ID passed per call, never stored on the shared client
"""
from typing import Any, Dict, List, Optional

import httpx

from core.config import AdsConfig
from core.exceptions import AdsAPIError, AdsConnectionError, AdsDataError
from core.observability import Timer, get_correlation_id, get_logger
from core.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitOpenError,
    RetryConfig,
    retry_with_backoff,
)

logger = get_logger(__name__)

# Resilience configuration
RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    base_delay=1.0,
    max_delay=30.0,
    exponential_base=2.0
)

CIRCUIT_BREAKER_CONFIG = CircuitBreakerConfig(
    failure_threshold=5,
    recovery_timeout=60.0,
    half_open_requests=1
)

# Global circuit breaker instance
_circuit_breaker = CircuitBreaker(config=CIRCUIT_BREAKER_CONFIG)


def search_time_budget(timeout: float, retry: Optional[RetryConfig] = None) -> float:
    """
    Longest one search page can take when every attempt times out.

    Covers all retry attempts plus the backoff sleeps between them,
    including maximum jitter.
    """
    retry = retry or RETRY_CONFIG
    backoff = sum(retry.delay_for(attempt) for attempt in range(1, retry.max_attempts))
    return retry.max_attempts * timeout + backoff * (1 + retry.jitter)


def _error_message(response: httpx.Response) -> str:
    """Pull the message out of a Google Ads error body, falling back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or response.text[:500]
    return response.text[:500]


class GoogleAdsClient:
    """
    Async client for GAQL searches.

    Usage:
        async with GoogleAdsClient(developer_token=..., access_token=...) as client:
            rows = await client.search("1234567890", "SELECT campaign.id FROM campaign")
    """

    def __init__(
        self,
        developer_token: str,
        access_token: str,
        base_url: str = "https://googleads.googleapis.com/v17",
        login_customer_id: Optional[str] = None,
        timeout: float = 30.0,
    ):
        if not developer_token:
            raise ValueError("GOOGLE_ADS_DEVELOPER_TOKEN is required")
        if not access_token:
            raise ValueError("GOOGLE_ADS_ACCESS_TOKEN is required")

        self.developer_token = developer_token
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.login_customer_id = login_customer_id
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(cls, ads_config: AdsConfig) -> "GoogleAdsClient":
        return cls(
            developer_token=ads_config.developer_token,
            access_token=ads_config.access_token,
            base_url=ads_config.base_url,
            login_customer_id=ads_config.login_customer_id,
            timeout=ads_config.request_timeout,
        )

    @property
    def headers(self) -> Dict[str, str]:
        """Request headers with auth."""
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "developer-token": self.developer_token,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.login_customer_id:
            headers["login-customer-id"] = self.login_customer_id
        return headers

    async def connect(self) -> None:
        """Create HTTP client with connection pooling."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.headers,
                timeout=self.timeout,
                limits=httpx.Limits(
                    max_keepalive_connections=10,
                    max_connections=20,
                )
            )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GoogleAdsClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(self, customer_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a search request with retry and circuit breaker.

        Raises:
            AdsConnectionError: Network/timeout errors
            AdsAPIError: API returned error response
            AdsDataError: Response body has an unexpected shape
            CircuitOpenError: Circuit breaker is open
        """
        if not await _circuit_breaker.can_execute():
            raise CircuitOpenError(
                f"Circuit breaker is open, search for customer {customer_id} rejected"
            )

        try:
            result = await retry_with_backoff(
                self._do_request,
                customer_id, body,
                config=RETRY_CONFIG,
                retryable_exceptions=(AdsConnectionError,),
            )
            await _circuit_breaker.record_success()
            return result

        except (AdsAPIError, AdsConnectionError, AdsDataError):
            await _circuit_breaker.record_failure()
            raise

        except BaseException:
            # Cancelled mid-call; no await here so the slot is freed before unwinding
            _circuit_breaker.release_half_open_slot()
            raise

    async def _do_request(self, customer_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a single search request (called by retry wrapper)."""
        if not self._client:
            await self.connect()

        url = f"{self.base_url}/customers/{customer_id}/googleAds:search"

        request_headers = {}
        correlation_id = get_correlation_id()
        if correlation_id:
            request_headers["X-Request-ID"] = correlation_id

        try:
            with Timer("google_ads_search", logger):
                response = await self._client.post(
                    url,
                    json=body,
                    headers=request_headers or None,
                )
        except httpx.TimeoutException as e:
            logger.error(
                f"Google Ads request timeout for customer {customer_id}",
                extra={"customer_id": customer_id, "timeout": self.timeout}
            )
            raise AdsConnectionError(
                f"Request timeout after {self.timeout}s",
                retry_after=5
            ) from e
        except httpx.RequestError as e:
            logger.error(
                f"Google Ads request failed for customer {customer_id} - {e}",
                extra={"customer_id": customer_id, "error": str(e)}
            )
            raise AdsConnectionError(str(e)) from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(
                f"Google Ads API error {response.status_code}: {message}",
                extra={"customer_id": customer_id, "status_code": response.status_code}
            )
            raise AdsAPIError(
                f"Google Ads API returned {response.status_code}",
                status_code=response.status_code,
                details=message
            )

        if not response.content:
            return {}

        try:
            payload = response.json()
        except ValueError as e:
            raise AdsDataError("Response is not JSON", expected="object", got="text") from e

        if not isinstance(payload, dict):
            raise AdsDataError(
                "Unexpected search response",
                expected="object",
                got=type(payload).__name__
            )
        return payload

    async def search(self, customer_id: str, query: str) -> List[Dict[str, Any]]:
        """
        Run a GAQL query and return every result row across pages.

        Args:
            customer_id: 10-digit customer ID without dashes
            query: GAQL query

        Returns:
            List of result items (`{"campaign": ..., "metrics": ..., "segments": ...}`)
        """
        results: List[Dict[str, Any]] = []
        page_token: Optional[str] = None

        while True:
            body: Dict[str, Any] = {"query": query}
            if page_token:
                body["pageToken"] = page_token

            payload = await self._request(customer_id, body)

            page = payload.get("results") or []
            if not isinstance(page, list):
                raise AdsDataError(
                    "Unexpected results field",
                    expected="list",
                    got=type(page).__name__
                )
            results.extend(page)

            page_token = payload.get("nextPageToken")
            if not page_token:
                break

        logger.debug(
            f"GAQL search returned {len(results)} rows",
            extra={"customer_id": customer_id, "rows": len(results)}
        )
        return results
