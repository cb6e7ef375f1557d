"""
Structured logging, request correlation IDs and in-process metrics.

Usage:
    from core.observability import setup_logging, get_logger, correlation_context

    # At startup:
    setup_logging()

    # Per module:
    logger = get_logger(__name__)

    # Around a unit of work:
    with correlation_context(request_id):
        logger.info("Fetching rows", extra={"campaign_id": campaign_id})
"""
import json
import logging
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Correlation ID of the request currently being served
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# LogRecord attributes that are not user-supplied extras
_RECORD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "asctime", "taskName",
}


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set correlation ID in context."""
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    """Generate a new short correlation ID."""
    return uuid.uuid4().hex[:8]


class correlation_context:
    """Context manager that scopes a correlation ID to a block."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self.token = None

    def __enter__(self) -> str:
        self.token = _correlation_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, *args):
        _correlation_id.reset(self.token)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """
    JSON log formatter.

    Emits timestamp, level, logger and message, the correlation ID when
    one is set, any `extra=` fields and the formatted exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id

        entry.update(_extras(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Plain-text formatter.

    Format: TIMESTAMP - LEVEL - LOGGER [CORRELATION_ID] - MESSAGE | extras
    """

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        correlation_str = f" [{correlation_id}]" if correlation_id else ""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        line = f"{timestamp} - {record.levelname:8} - {record.name}{correlation_str} - {record.getMessage()}"

        extras = _extras(record)
        if extras:
            line += f" | {extras}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        return line


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_libs: bool = False
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit JSON lines instead of human-readable text
        include_libs: Keep third-party library loggers at the same level
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not include_libs:
        for noisy in ("httpx", "httpcore", "uvicorn.access"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════════════════
# TIMING
# ═══════════════════════════════════════════════════════════════════════════════

class Timer:
    """
    Context manager for timing operations.

    Usage:
        with Timer("google_ads_search", logger) as t:
            payload = await client.search(...)
        print(t.elapsed_ms)
    """

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        if self.logger:
            level = logging.WARNING if self.elapsed_ms > 1000 else logging.DEBUG
            self.logger.log(
                level,
                f"{self.name} completed",
                extra={"duration_ms": round(self.elapsed_ms, 2)}
            )


# ═══════════════════════════════════════════════════════════════════════════════
# METRICS COLLECTOR
# ═══════════════════════════════════════════════════════════════════════════════

class MetricsCollector:
    """
    In-memory counters for requests, errors and timings.

    Only the last `max_samples` timings per operation are kept.
    """

    def __init__(self, max_samples: int = 100):
        self._request_counts: Dict[str, int] = {}
        self._error_counts: Dict[str, int] = {}
        self._timing_samples: Dict[str, list] = {}
        self._max_samples = max_samples

    def record_request(self, endpoint: str) -> None:
        self._request_counts[endpoint] = self._request_counts.get(endpoint, 0) + 1

    def record_error(self, error_type: str) -> None:
        self._error_counts[error_type] = self._error_counts.get(error_type, 0) + 1

    def record_timing(self, operation: str, duration_ms: float) -> None:
        samples = self._timing_samples.setdefault(operation, [])
        samples.append(duration_ms)
        if len(samples) > self._max_samples:
            del samples[: len(samples) - self._max_samples]

    def get_stats(self) -> Dict[str, Any]:
        """Snapshot of counters plus avg/min/max/p50 per timed operation."""
        timing = {}
        for operation, samples in self._timing_samples.items():
            if not samples:
                continue
            ordered = sorted(samples)
            timing[operation] = {
                "count": len(samples),
                "avg_ms": round(sum(samples) / len(samples), 2),
                "min_ms": round(ordered[0], 2),
                "max_ms": round(ordered[-1], 2),
                "p50_ms": round(ordered[len(ordered) // 2], 2),
            }

        return {
            "requests": dict(self._request_counts),
            "errors": dict(self._error_counts),
            "timing": timing,
        }


# Global metrics instance
metrics = MetricsCollector()
