"""
Custom exception hierarchy for ads reporting operations.

Exception Hierarchy:
    AdsError (base)
    ├── AdsConnectionError       - Network/timeout talking to Google Ads (recoverable)
    ├── AdsAPIError              - Upstream returned an error response
    ├── AdsDataError             - Response structure we cannot read
    └── UpstreamUnavailableError - Reporting client failed to load metrics

    ValidationError              - Input validation failed
"""

# Message shown when the backend gives no usable error text
DEFAULT_ERROR_MESSAGE = "Failed to load data"


class AdsError(Exception):
    """Base exception for all ads-reporting errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class AdsConnectionError(AdsError):
    """
    Network-related errors (timeout, connection refused, etc.).

    These are typically recoverable with retry.
    """

    def __init__(self, message: str, details: str = None, retry_after: int = None):
        super().__init__(message, details)
        self.retry_after = retry_after


class AdsAPIError(AdsError):
    """
    Upstream API returned an error response.

    Check status_code and error_code for specifics.
    """

    def __init__(
        self,
        message: str,
        details: str = None,
        status_code: int = None,
        error_code: str = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.error_code = error_code


class AdsDataError(AdsError):
    """
    Upstream response has unexpected structure.

    The API answered, but not in a shape we can read.
    """

    def __init__(self, message: str, details: str = None, expected: str = None, got: str = None):
        super().__init__(message, details)
        self.expected = expected
        self.got = got


class UpstreamUnavailableError(AdsError):
    """
    Raw-metrics fetch failed (network error, non-2xx, timeout).

    Normalized to a {message, status} pair so the UI can tell
    "failed to load" apart from a valid all-zero KPI.
    """

    def __init__(
        self,
        message: str = DEFAULT_ERROR_MESSAGE,
        status: int = 500,
        details: str = None,
    ):
        super().__init__(message or DEFAULT_ERROR_MESSAGE, details)
        self.status = status

    def to_dict(self) -> dict:
        return {"message": self.message, "status": self.status}


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating user input before processing.
    """

    def __init__(self, field: str, message: str, value: any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"
