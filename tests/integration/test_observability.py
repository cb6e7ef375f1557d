"""
Integration tests for core/observability.py

Tests structured logging, correlation IDs, and metrics collection.
"""
import logging
import json
import time as time_module

from core.observability import (
    generate_correlation_id,
    set_correlation_id,
    get_correlation_id,
    correlation_context,
    Timer,
    MetricsCollector,
    StructuredFormatter,
    HumanReadableFormatter,
    get_logger,
)


def _record(msg: str = "Test", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID helpers."""

    def test_generate_correlation_id(self):
        cid = generate_correlation_id()
        assert len(cid) == 8
        assert cid != generate_correlation_id()

    def test_set_and_get_correlation_id(self):
        set_correlation_id("abc12345")
        assert get_correlation_id() == "abc12345"
        set_correlation_id(None)

    def test_context_restores_previous(self):
        set_correlation_id("outer")
        with correlation_context("inner") as cid:
            assert cid == "inner"
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"
        set_correlation_id(None)

    def test_context_generates_id(self):
        with correlation_context() as cid:
            assert cid
            assert get_correlation_id() == cid


class TestTimer:
    """Tests for Timer context manager."""

    def test_measures_elapsed_time(self):
        with Timer("sleep") as timer:
            time_module.sleep(0.01)
        assert timer.elapsed_ms >= 10

    def test_logs_when_logger_given(self, caplog):
        logger = get_logger("test.timer")
        with caplog.at_level(logging.DEBUG, logger="test.timer"):
            with Timer("google_ads_search", logger):
                pass
        assert "google_ads_search completed" in caplog.text


class TestMetricsCollector:
    """Tests for MetricsCollector class."""

    def test_record_request(self):
        collector = MetricsCollector()
        collector.record_request("GET /api/google-ads/campaigns")
        collector.record_request("GET /api/google-ads/campaigns")
        assert collector.get_stats()["requests"]["GET /api/google-ads/campaigns"] == 2

    def test_record_error(self):
        collector = MetricsCollector()
        collector.record_error("HTTP_503")
        assert collector.get_stats()["errors"] == {"HTTP_503": 1}

    def test_record_timing(self):
        collector = MetricsCollector()
        for value in (10.0, 20.0, 30.0):
            collector.record_timing("kpi", value)

        timing = collector.get_stats()["timing"]["kpi"]
        assert timing["count"] == 3
        assert timing["avg_ms"] == 20.0
        assert timing["min_ms"] == 10.0
        assert timing["max_ms"] == 30.0

    def test_samples_bounded(self):
        collector = MetricsCollector(max_samples=5)
        for value in range(10):
            collector.record_timing("kpi", float(value))
        assert collector.get_stats()["timing"]["kpi"]["count"] == 5


class TestStructuredFormatter:
    """Tests for JSON log formatter."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(_record("Test message")))

        assert parsed["message"] == "Test message"
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test.logger"
        assert "T" in parsed["timestamp"]

    def test_includes_extras(self):
        parsed = json.loads(StructuredFormatter().format(_record(campaign_id="camp1", rows=7)))
        assert parsed["campaign_id"] == "camp1"
        assert parsed["rows"] == 7

    def test_includes_correlation_id(self):
        with correlation_context("corr-456"):
            parsed = json.loads(StructuredFormatter().format(_record()))
        assert parsed["correlation_id"] == "corr-456"


class TestHumanReadableFormatter:

    def test_format(self):
        with correlation_context("abcd1234"):
            line = HumanReadableFormatter().format(_record("Fetched rows", rows=3))

        assert "INFO" in line
        assert "[abcd1234]" in line
        assert "Fetched rows" in line
        assert "'rows': 3" in line


class TestGetLogger:

    def test_returns_logger(self):
        logger = get_logger("test.module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test.module"
