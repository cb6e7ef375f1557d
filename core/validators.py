"""
Input validation functions for API parameters.

All validators raise ValidationError on invalid input.
"""

import re
from typing import Optional

from core.exceptions import ValidationError
from core.models import Bucket, Period

VALID_PERIODS = [p.value for p in Period]
VALID_BUCKETS = [b.value for b in Bucket]

CAMPAIGN_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
CUSTOMER_ID_PATTERN = re.compile(r"^\d{10}$")


def validate_period(value: Optional[str], field: str = "period") -> Period:
    """
    Validate a dashboard period token.

    Args:
        value: One of 30j, 14j, 7j, 3j, 24h
        field: Field name for error messages

    Returns:
        Matching Period

    Raises:
        ValidationError: If the token is missing or unknown
    """
    if isinstance(value, Period):
        return value

    if not value:
        raise ValidationError(field, "Period is required")

    try:
        return Period(str(value).strip())
    except ValueError:
        raise ValidationError(field, f"Must be one of {VALID_PERIODS}", value)


def validate_bucket(value: Optional[str], field: str = "bucket") -> Bucket:
    """Validate an upstream bucket token (7d or 30d)."""
    if isinstance(value, Bucket):
        return value

    if not value:
        raise ValidationError(field, "Bucket is required")

    try:
        return Bucket(str(value).strip())
    except ValueError:
        raise ValidationError(field, f"Must be one of {VALID_BUCKETS}", value)


def validate_campaign_id(value: Optional[str], field: str = "campaign_id") -> str:
    """
    Validate a campaign identifier.

    Mock ids (camp1) and numeric Google Ads ids are both accepted; anything
    outside letters, digits, dash and underscore is rejected.

    Returns:
        Stripped campaign id
    """
    if value is None:
        raise ValidationError(field, "Campaign ID is required")

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string", value)

    value = value.strip()
    if not value:
        raise ValidationError(field, "Campaign ID is required")

    if not CAMPAIGN_ID_PATTERN.match(value):
        raise ValidationError(
            field,
            "Only letters, digits, '-' and '_' are allowed (max 64 chars)",
            value
        )

    return value


def validate_customer_id(
    value: Optional[str],
    field: str = "customer_id",
    allow_none: bool = True
) -> Optional[str]:
    """
    Validate a Google Ads customer ID (CID).

    Accepts the dashed display form (123-456-7890).

    Returns:
        The 10-digit id without dashes, or None

    Raises:
        ValidationError: If the id is not 10 digits
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if allow_none:
            return None
        raise ValidationError(field, "Customer ID is required")

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string", value)

    normalized = value.strip().replace("-", "")
    if not CUSTOMER_ID_PATTERN.match(normalized):
        raise ValidationError(field, "Must be a 10-digit customer ID", value)

    return normalized
