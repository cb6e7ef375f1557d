"""
Centralized configuration for the Ads KPI dashboard.

Values come from environment variables (a local .env file is loaded
first) with development-friendly defaults.

Usage:
    from core.config import config

    source = config.ads.source
    ttl = config.cache.kpi_ttl_seconds
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

VALID_SOURCES = ("mock", "live")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class APIConfig:
    """Reporting client settings (frontend side of the proxy)."""

    backend_url: str = field(
        default_factory=lambda: os.getenv("BACKEND_URL", "http://localhost:3002")
    )
    prefix: str = "/api"
    request_timeout: float = 10.0

    @property
    def base_url(self) -> str:
        return f"{self.backend_url.rstrip('/')}{self.prefix}"


@dataclass(frozen=True)
class AdsConfig:
    """Metrics source configuration (mock data or the Google Ads API)."""

    source: str = field(default_factory=lambda: os.getenv("ADS_SOURCE", "mock").lower())
    base_url: str = field(
        default_factory=lambda: os.getenv(
            "GOOGLE_ADS_BASE_URL", "https://googleads.googleapis.com/v17"
        )
    )
    developer_token: str = field(
        default_factory=lambda: os.getenv("GOOGLE_ADS_DEVELOPER_TOKEN", "")
    )
    access_token: str = field(default_factory=lambda: os.getenv("GOOGLE_ADS_ACCESS_TOKEN", ""))
    login_customer_id: Optional[str] = field(
        default_factory=lambda: os.getenv("GOOGLE_ADS_LOGIN_CUSTOMER_ID") or None
    )
    # Account used when a request carries no X-Google-Ads-CID header
    default_customer_id: str = field(
        default_factory=lambda: os.getenv("GOOGLE_ADS_DEFAULT_CID", "1234567890")
    )
    request_timeout: float = 30.0
    mock_latency_ms: int = field(default_factory=lambda: _env_int("MOCK_LATENCY_MS", 0))

    @property
    def is_live(self) -> bool:
        return self.source == "live"


@dataclass(frozen=True)
class CacheConfig:
    """KPI freshness cache configuration."""

    redis_url: str = field(
        default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0")
    )
    enabled: bool = field(
        default_factory=lambda: os.getenv("CACHE_ENABLED", "true").lower() == "true"
    )
    kpi_ttl_seconds: int = 300  # 5 minutes


@dataclass(frozen=True)
class WebConfig:
    """Backend proxy server configuration."""

    host: str = field(default_factory=lambda: os.getenv("WEB_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("WEB_PORT", 3002))

    # Rate limiting
    rate_limit_per_minute: int = 60


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    api: APIConfig = field(default_factory=APIConfig)
    ads: AdsConfig = field(default_factory=AdsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    web: WebConfig = field(default_factory=WebConfig)


# Global config instance
config = AppConfig()

VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(app_config: Optional[AppConfig] = None) -> None:
    """
    Validate that all required configuration is present.

    Call this on application startup to fail fast with clear error messages
    instead of cryptic runtime failures.

    Raises:
        ConfigurationError: If required configuration is missing
    """
    cfg = app_config or config
    errors: List[str] = []

    if cfg.ads.source not in VALID_SOURCES:
        errors.append(
            f"ADS_SOURCE must be one of {', '.join(VALID_SOURCES)} (got {cfg.ads.source!r})"
        )

    if cfg.ads.is_live:
        if not cfg.ads.developer_token:
            errors.append("GOOGLE_ADS_DEVELOPER_TOKEN is required when ADS_SOURCE=live")
        if not cfg.ads.access_token:
            errors.append("GOOGLE_ADS_ACCESS_TOKEN is required when ADS_SOURCE=live")

    if not re.fullmatch(r"\d{10}", cfg.ads.default_customer_id.replace("-", "")):
        errors.append("GOOGLE_ADS_DEFAULT_CID must be a 10-digit customer ID")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
