"""
Tests for core.periods module.
"""
import pytest

from core.exceptions import ValidationError
from core.models import Bucket, Period
from core.periods import (
    DEFAULT_BUCKET,
    PERIOD_BUCKETS,
    parse_period,
    resolve_bucket,
    resolve_period,
)


class TestResolveBucket:
    """Tests for resolve_bucket function."""

    @pytest.mark.parametrize("period,expected", [
        ("30j", Bucket.LAST_30_DAYS),
        ("14j", Bucket.LAST_7_DAYS),
        ("7j", Bucket.LAST_7_DAYS),
        ("3j", Bucket.LAST_7_DAYS),
        ("24h", Bucket.LAST_7_DAYS),
    ])
    def test_known_periods(self, period, expected):
        assert resolve_bucket(period) == expected

    def test_accepts_enum(self):
        assert resolve_bucket(Period.DAYS_30) == Bucket.LAST_30_DAYS

    @pytest.mark.parametrize("period", ["90j", "", None, "7J", "week"])
    def test_unknown_falls_back_to_30d(self, period):
        """Should never reject input."""
        assert resolve_bucket(period) == DEFAULT_BUCKET == Bucket.LAST_30_DAYS

    def test_24h_collapses_to_7j_bucket(self):
        """24h is served by the same bucket as 7j (lossy mapping kept on purpose)."""
        assert resolve_bucket("24h") == resolve_bucket("7j")

    def test_idempotent(self):
        for period in list(PERIOD_BUCKETS) + ["bogus"]:
            assert resolve_bucket(period) == resolve_bucket(period)

    def test_every_period_mapped(self):
        assert set(PERIOD_BUCKETS) == set(Period)


class TestResolvePeriod:
    """Tests for resolve_period function."""

    def test_exact_match_not_approximated(self):
        resolution = resolve_period("7j")
        assert resolution.period == "7j"
        assert resolution.bucket == Bucket.LAST_7_DAYS
        assert resolution.approximated is False

    def test_30j_not_approximated(self):
        assert resolve_period("30j").approximated is False

    @pytest.mark.parametrize("period", ["14j", "3j", "24h"])
    def test_collapsed_periods_flagged(self, period):
        assert resolve_period(period).approximated is True

    def test_unknown_flagged(self):
        resolution = resolve_period("90j")
        assert resolution.period == "90j"
        assert resolution.bucket == Bucket.LAST_30_DAYS
        assert resolution.approximated is True


class TestParsePeriod:
    """Tests for the strict parser."""

    def test_valid(self):
        assert parse_period("24h") == Period.HOURS_24

    def test_invalid_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_period("90j")
        assert exc_info.value.field == "period"
