"""
Tests for core.validators module.
"""
import pytest

from core.exceptions import ValidationError
from core.models import Bucket, Period
from core.validators import (
    validate_bucket,
    validate_campaign_id,
    validate_customer_id,
    validate_period,
)


class TestValidatePeriod:
    """Tests for validate_period function."""

    @pytest.mark.parametrize("value", ["30j", "14j", "7j", "3j", "24h"])
    def test_valid_periods(self, value):
        assert validate_period(value) == Period(value)

    def test_strips_whitespace(self):
        assert validate_period(" 7j ") == Period.DAYS_7

    def test_enum_passthrough(self):
        assert validate_period(Period.DAYS_3) is Period.DAYS_3

    def test_missing_period(self):
        with pytest.raises(ValidationError, match="required"):
            validate_period(None)

    def test_unknown_period(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_period("7d")
        assert exc_info.value.field == "period"
        assert exc_info.value.value == "7d"


class TestValidateBucket:
    """Tests for validate_bucket function."""

    def test_valid_buckets(self):
        assert validate_bucket("7d") == Bucket.LAST_7_DAYS
        assert validate_bucket("30d") == Bucket.LAST_30_DAYS

    def test_period_token_rejected(self):
        with pytest.raises(ValidationError):
            validate_bucket("7j")

    def test_empty_bucket(self):
        with pytest.raises(ValidationError):
            validate_bucket("")


class TestValidateCampaignId:
    """Tests for validate_campaign_id function."""

    @pytest.mark.parametrize("value", ["camp1", "12345678901", "my_campaign-2"])
    def test_valid_ids(self, value):
        assert validate_campaign_id(value) == value

    def test_strips(self):
        assert validate_campaign_id("  camp1 ") == "camp1"

    @pytest.mark.parametrize("value", ["", "   ", "camp 1", "1; DROP", "a" * 65, "../etc"])
    def test_invalid_ids(self, value):
        with pytest.raises(ValidationError):
            validate_campaign_id(value)

    def test_none(self):
        with pytest.raises(ValidationError, match="required"):
            validate_campaign_id(None)

    def test_non_string(self):
        with pytest.raises(ValidationError, match="string"):
            validate_campaign_id(123)


class TestValidateCustomerId:
    """Tests for validate_customer_id function."""

    def test_plain_digits(self):
        assert validate_customer_id("1234567890") == "1234567890"

    def test_dashed_form(self):
        assert validate_customer_id("123-456-7890") == "1234567890"

    def test_none_allowed(self):
        assert validate_customer_id(None) is None
        assert validate_customer_id("  ") is None

    def test_none_not_allowed(self):
        with pytest.raises(ValidationError, match="required"):
            validate_customer_id(None, allow_none=False)

    @pytest.mark.parametrize("value", ["123", "12345678901", "abcdefghij"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError, match="10-digit"):
            validate_customer_id(value)

    def test_custom_field_name(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_customer_id("42", field="X-Google-Ads-CID")
        assert exc_info.value.field == "X-Google-Ads-CID"
