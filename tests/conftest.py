"""
Pytest configuration and shared fixtures.
"""
import os

# Tests run against the mock source with no Redis; set before core.config loads
os.environ.setdefault("ADS_SOURCE", "mock")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("GOOGLE_ADS_DEFAULT_CID", "1234567890")

import pytest
from typing import Any, Dict, List

from core.models import MetricRow, RequestContext


@pytest.fixture
def scenario_a_rows() -> List[MetricRow]:
    """Two daily rows whose totals are easy to check by hand."""
    return [
        MetricRow(
            impressions=1000,
            clicks=50,
            cost_micros=10_000_000,
            conversions=5,
            conversion_value=200,
            date="2026-01-10",
        ),
        MetricRow(
            impressions=2000,
            clicks=100,
            cost_micros=20_000_000,
            conversions=10,
            conversion_value=400,
            date="2026-01-11",
        ),
    ]


@pytest.fixture
def scenario_a_results() -> List[Dict[str, Any]]:
    """Same rows as scenario_a_rows, shaped like Google Ads REST results."""
    return [
        {
            "metrics": {
                "impressions": "1000",
                "clicks": "50",
                "costMicros": "10000000",
                "conversions": 5.0,
                "conversionsValue": 200.0,
            },
            "segments": {"date": "2026-01-10"},
        },
        {
            "metrics": {
                "impressions": "2000",
                "clicks": "100",
                "costMicros": "20000000",
                "conversions": 10.0,
                "conversionsValue": 400.0,
            },
            "segments": {"date": "2026-01-11"},
        },
    ]


@pytest.fixture
def sample_campaign_item() -> Dict[str, Any]:
    """Campaign result item from the Google Ads REST API."""
    return {
        "campaign": {
            "resourceName": "customers/1234567890/campaigns/111",
            "id": "111",
            "name": "Campagne Search - Titres Albums",
            "status": "ENABLED",
            "advertisingChannelType": "SEARCH",
            "biddingStrategyType": "TARGET_CPA",
        }
    }


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(customer_id="1234567890")
