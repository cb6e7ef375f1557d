"""
Period-to-bucket resolution.

The upstream metrics query only reports over 7-day and 30-day windows.
Finer dashboard periods (24h, 3 days) and 14 days are served from the
7-day bucket. Callers asking for "24h" therefore receive 7-day totals;
`resolve_period` flags such answers as approximated so the UI can say so.
"""
from dataclasses import dataclass
from typing import Union

from core.models import Bucket, Period
from core.observability import get_logger

logger = get_logger(__name__)

# Dashboard period -> upstream bucket. 14j/3j/24h use the closest bucket
# the upstream exposes.
PERIOD_BUCKETS = {
    Period.DAYS_30: Bucket.LAST_30_DAYS,
    Period.DAYS_14: Bucket.LAST_7_DAYS,
    Period.DAYS_7: Bucket.LAST_7_DAYS,
    Period.DAYS_3: Bucket.LAST_7_DAYS,
    Period.HOURS_24: Bucket.LAST_7_DAYS,
}

# Unrecognised tokens fall back to the widest window
DEFAULT_BUCKET = Bucket.LAST_30_DAYS


@dataclass(frozen=True)
class BucketResolution:
    """Outcome of mapping a requested period onto an upstream bucket."""
    period: str
    bucket: Bucket
    approximated: bool


def _as_period(period: Union[Period, str, None]):
    if isinstance(period, Period):
        return period
    try:
        return Period(period)
    except ValueError:
        return None


def resolve_bucket(period: Union[Period, str, None]) -> Bucket:
    """
    Map a dashboard period onto the upstream bucket that serves it.

    Total: every input, known or not, yields exactly one bucket.
    """
    known = _as_period(period)
    if known is None:
        return DEFAULT_BUCKET
    return PERIOD_BUCKETS[known]


def resolve_period(period: Union[Period, str, None]) -> BucketResolution:
    """Resolve a period and report whether the bucket covers a different window."""
    bucket = resolve_bucket(period)
    known = _as_period(period)
    approximated = known is None or known.days != bucket.days

    label = known.value if known is not None else str(period)
    if approximated:
        logger.debug(
            f"Period {label} served from {bucket.value} bucket",
            extra={"period": label, "bucket": bucket.value}
        )

    return BucketResolution(period=label, bucket=bucket, approximated=approximated)


def parse_period(value: Union[Period, str, None]) -> Period:
    """
    Strict counterpart of resolve_period for request parameters.

    Raises:
        ValidationError: If the token is not one of the dashboard periods
    """
    from core.validators import validate_period
    return validate_period(value)
