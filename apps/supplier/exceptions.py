"""Errors raised by the supplier API client."""
from typing import Optional


class SupplierError(Exception):
    """Base error for failed supplier calls."""

    def __init__(self, message: str, code: Optional[int] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class SupplierAuthError(SupplierError):
    """Missing credentials, rejected token or throttled token refresh."""
    pass


class SupplierRateLimitError(SupplierError):
    """Rate limit still hit after the retry budget was spent."""
    pass


class SupplierUnavailable(SupplierError):
    """Network failure or server error after the retry budget was spent."""
    pass
