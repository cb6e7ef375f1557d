"""
Tests for core.config module.
"""
import pytest
from unittest.mock import patch

from core.config import (
    AdsConfig,
    APIConfig,
    AppConfig,
    CacheConfig,
    ConfigurationError,
    validate_config,
)


class TestAPIConfig:
    """Tests for APIConfig."""

    def test_base_url_appends_prefix(self):
        api = APIConfig(backend_url="http://backend:3002/")
        assert api.base_url == "http://backend:3002/api"

    def test_default_timeout(self):
        assert APIConfig().request_timeout == 10.0

    def test_backend_url_from_env(self):
        with patch.dict("os.environ", {"BACKEND_URL": "http://example.test"}):
            assert APIConfig().backend_url == "http://example.test"


class TestAdsConfig:
    """Tests for AdsConfig."""

    def test_source_lowercased(self):
        with patch.dict("os.environ", {"ADS_SOURCE": "LIVE"}):
            assert AdsConfig().is_live

    def test_mock_latency_invalid_env(self):
        with patch.dict("os.environ", {"MOCK_LATENCY_MS": "soon"}):
            assert AdsConfig().mock_latency_ms == 0

    def test_default_customer(self):
        with patch.dict("os.environ", {}, clear=True):
            assert AdsConfig().default_customer_id == "1234567890"


class TestCacheConfig:

    def test_ttl_is_five_minutes(self):
        assert CacheConfig().kpi_ttl_seconds == 300

    def test_disabled_from_env(self):
        with patch.dict("os.environ", {"CACHE_ENABLED": "false"}):
            assert CacheConfig().enabled is False


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_mock_source_valid(self):
        validate_config(AppConfig(ads=AdsConfig(source="mock")))

    def test_unknown_source(self):
        with pytest.raises(ConfigurationError, match="ADS_SOURCE"):
            validate_config(AppConfig(ads=AdsConfig(source="csv")))

    def test_live_requires_tokens(self):
        cfg = AppConfig(ads=AdsConfig(source="live", developer_token="", access_token=""))

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(cfg)

        message = str(exc_info.value)
        assert "GOOGLE_ADS_DEVELOPER_TOKEN" in message
        assert "GOOGLE_ADS_ACCESS_TOKEN" in message

    def test_live_with_tokens(self):
        validate_config(AppConfig(ads=AdsConfig(
            source="live", developer_token="dev", access_token="token",
        )))

    def test_bad_default_customer(self):
        with pytest.raises(ConfigurationError, match="GOOGLE_ADS_DEFAULT_CID"):
            validate_config(AppConfig(ads=AdsConfig(source="mock", default_customer_id="42")))

    def test_dashed_default_customer_ok(self):
        validate_config(AppConfig(ads=AdsConfig(source="mock", default_customer_id="123-456-7890")))
