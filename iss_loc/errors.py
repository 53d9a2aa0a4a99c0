"""
Error types raised by the sync core.

Every error aborts the current run. The scheduler catches ``SyncError``,
logs it and waits for the next trigger; nothing is retried in-process.
"""

from typing import Optional


class SyncError(Exception):
    """Base class for every failure raised by the sync core."""


class UpstreamError(SyncError):
    """A call to an external API did not succeed."""


class UpstreamHTTPError(UpstreamError):
    """An external API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, reason: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class UpstreamAPIError(UpstreamError):
    """A 2xx response whose envelope reports a logical failure."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class ValidationError(SyncError):
    """The telemetry payload is malformed or incomplete."""


class ConfigurationError(SyncError):
    """A required setting is missing or invalid."""
