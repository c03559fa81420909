"""
Query error taxonomy.

Validation errors are raised before the store is touched and are reported to
the caller as client errors. Store errors surface from the persistence layer
and are reported as retryable server-side errors.
"""
from typing import Iterable, Optional


class LogQueryError(Exception):
    """Base class for all log query failures."""

    status_code = 500
    error_code = "log_query_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Validation errors
# -----------------

class QueryValidationError(LogQueryError):
    """Request rejected before reaching the store."""

    status_code = 400
    error_code = "invalid_query"


class UnsupportedLimitValue(QueryValidationError):
    """Enumerated-mode limit outside the allowed set."""

    error_code = "unsupported_limit"

    def __init__(self, limit: int, allowed: Iterable[int]):
        self.limit = limit
        self.allowed = sorted(allowed)
        super().__init__(f"Unsupported limit {limit}; allowed values: {self.allowed}")


class UnsupportedRecencyValue(QueryValidationError):
    """Recency minutes outside the endpoint's allowed set."""

    error_code = "unsupported_minutes"

    def __init__(self, minutes: int, allowed: Iterable[int]):
        self.minutes = minutes
        self.allowed = sorted(allowed)
        super().__init__(f"Unsupported minutes {minutes}; allowed values: {self.allowed}")


class InvalidWindow(QueryValidationError):
    """Malformed or inverted time range."""

    error_code = "invalid_window"


# Store errors
# ------------

class StoreError(LogQueryError):
    """Failure raised by the log store."""

    status_code = 503
    error_code = "store_error"
    retryable = True


class StoreUnavailable(StoreError):
    """The log store could not be reached."""

    error_code = "store_unavailable"

    def __init__(self, message: str = "Log store unavailable", retry_after: Optional[int] = 5):
        super().__init__(message)
        self.retry_after = retry_after


class StoreTimeout(StoreError):
    """The log store did not answer in time."""

    status_code = 504
    error_code = "store_timeout"

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Log store query exceeded {timeout_seconds}s")
