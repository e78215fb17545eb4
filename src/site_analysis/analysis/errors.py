"""Errors raised by the analysis pipeline."""

from typing import Optional


class AnalysisError(Exception):
    """Base class for pipeline failures that map onto an HTTP status."""

    status_code: int = 500


class InvalidRequestError(AnalysisError):
    """Raised when the request is rejected before any provider is called."""

    status_code = 400


class NotFoundError(AnalysisError):
    """Raised when the geocoder returns no candidate for a postcode."""

    status_code = 404


class UpstreamError(AnalysisError):
    """Raised when a data provider fails or answers with a non-success status."""

    status_code = 500

    def __init__(self, provider: str, upstream_status: Optional[int] = None, reason: Optional[str] = None):
        """Initialize the upstream error.

        Args:
            provider: Name of the provider that failed
            upstream_status: HTTP status code returned by the provider, if any
            reason: Extra description when no status code is available
        """
        self.provider = provider
        self.upstream_status = upstream_status
        self.reason = reason
        if upstream_status is not None:
            message = f"{provider} API error: {upstream_status}"
        else:
            message = f"{provider} API error: {reason or 'request failed'}"
        super().__init__(message)
