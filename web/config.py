"""
Backend proxy configuration.
"""
from core.config import config, VERSION

# Web server settings
WEB_HOST = config.web.host
WEB_PORT = config.web.port

# Per-client request quota applied by the slowapi limiter
RATE_LIMIT = f"{config.web.rate_limit_per_minute}/minute"

# Freshness window for server-side KPI responses
KPI_CACHE_TTL = config.cache.kpi_ttl_seconds

__all__ = ["WEB_HOST", "WEB_PORT", "RATE_LIMIT", "KPI_CACHE_TTL", "VERSION"]
