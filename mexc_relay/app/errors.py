"""Relay exception hierarchy.

Every error raised on a relay route derives from :class:`RelayError` and
carries the HTTP status the web layer answers with.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for relay errors."""

    status_code = 500
    headers: dict[str, str] | None = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(RelayError):
    """Malformed credentials or request fields."""

    status_code = 400


class UpstreamError(RelayError):
    """Exchange call failed (transport, HTTP status or API error code)."""

    status_code = 500

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class RateLimitExceededError(RelayError):
    """Client exceeded the per-window request cap."""

    status_code = 429

    def __init__(self, message: str, retry_after_sec: int | None = None) -> None:
        super().__init__(message)
        self.retry_after_sec = retry_after_sec
        if retry_after_sec is not None:
            self.headers = {"Retry-After": str(retry_after_sec)}


class ServiceUnavailableError(RelayError):
    """No data source could serve the request."""

    status_code = 503


class ProviderError(Exception):
    """AI provider call failed. Never surfaced over HTTP."""
