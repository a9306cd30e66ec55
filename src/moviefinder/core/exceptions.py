"""Custom exception hierarchy for MovieFinder.

This module defines a consistent exception hierarchy that enables:
- Structured error responses with error codes
- Consistent HTTP status code mapping
- A single mapping from catalog failures to user-visible messages

Usage:
    from moviefinder.core.exceptions import CatalogHTTPError, user_message

    try:
        ...
    except CatalogError as exc:
        state.error_message = user_message(exc)
"""

from typing import Any


class MovieFinderError(Exception):
    """Base exception for all MovieFinder errors.

    Attributes:
        code: Machine-readable error code (e.g., "CATALOG_HTTP_ERROR")
        message: Human-readable error message
        status_code: HTTP status code to return
        details: Additional error details (optional)
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Override default message
            code: Override default error code
            details: Additional error details
        """
        if message:
            self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Convert exception to API error response format.

        Args:
            request_id: Request correlation ID

        Returns:
            Error response dictionary
        """
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if request_id:
            error["request_id"] = request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


# =============================================================================
# Catalog Errors (client side)
# =============================================================================


class CatalogError(MovieFinderError):
    """Base class for failures talking to the movie catalog."""

    code: str = "CATALOG_ERROR"
    message: str = "Catalog request failed"
    status_code: int = 502


class CatalogCancelledError(CatalogError):
    """Raised when a request was superseded or timed out.

    Both cases are treated identically by callers; ``timed_out`` tells them
    apart for the fallback dataset and the retry prompt.
    """

    code: str = "CATALOG_CANCELLED"
    message: str = "Catalog request cancelled"
    status_code: int = 504

    def __init__(self, timed_out: bool = False, message: str | None = None) -> None:
        """Initialize with the cancellation reason."""
        self.timed_out = timed_out
        if not message and timed_out:
            message = "Catalog request timed out"
        super().__init__(message=message, details={"timed_out": timed_out})


class CatalogHTTPError(CatalogError):
    """Raised when the catalog answered with a non-2xx status."""

    code: str = "CATALOG_HTTP_ERROR"
    message: str = "Catalog returned an error status"

    def __init__(
        self,
        upstream_status: int,
        message: str | None = None,
        path: str | None = None,
    ) -> None:
        """Initialize with the upstream status code.

        Args:
            upstream_status: HTTP status returned by the catalog
            message: Override default message
            path: Request path, for logging
        """
        self.upstream_status = upstream_status
        details: dict[str, Any] = {"upstream_status": upstream_status}
        if path:
            details["path"] = path
        if not message:
            message = f"Catalog request failed with HTTP {upstream_status}"
        super().__init__(message=message, details=details)


class CatalogNetworkError(CatalogError):
    """Raised on transport failure before any response arrived."""

    code: str = "CATALOG_NETWORK_ERROR"
    message: str = "Could not reach the catalog"


class CatalogAuthError(CatalogError):
    """Raised when no catalog credential is configured."""

    code: str = "CATALOG_AUTH_NOT_CONFIGURED"
    message: str = "Catalog credential is not configured"
    status_code: int = 500


class CatalogUnknownError(CatalogError):
    """Raised for anything else (bad payloads, unexpected exceptions)."""

    code: str = "CATALOG_UNKNOWN_ERROR"
    message: str = "Unexpected catalog failure"


# =============================================================================
# Server-side Errors
# =============================================================================


class ExternalServiceError(MovieFinderError):
    """Base class for external service errors."""

    code: str = "EXTERNAL_SERVICE_ERROR"
    message: str = "External service error"
    status_code: int = 502


class AnalyticsUnavailableError(ExternalServiceError):
    """Raised when the analytics store cannot be reached."""

    code: str = "ANALYTICS_UNAVAILABLE"
    message: str = "Search analytics are temporarily unavailable"
    status_code: int = 503


# =============================================================================
# User-facing messages
# =============================================================================

TIMEOUT_MESSAGE = "Request timed out. Please try again."
INVALID_CREDENTIAL_MESSAGE = "Invalid API credential. Please check your TMDB token."
NOT_FOUND_MESSAGE = "API endpoint not found."
NETWORK_MESSAGE = "Network error. Please check your connection and try again."
AUTH_NOT_CONFIGURED_MESSAGE = "TMDB API credential is not configured."
GENERIC_MESSAGE = "Error fetching movies. Please try again later."


def user_message(exc: BaseException) -> str:
    """Map a catalog failure to the message shown next to the movie list."""
    if isinstance(exc, CatalogCancelledError):
        return TIMEOUT_MESSAGE
    if isinstance(exc, CatalogHTTPError):
        if exc.upstream_status == 401:
            return INVALID_CREDENTIAL_MESSAGE
        if exc.upstream_status == 404:
            return NOT_FOUND_MESSAGE
        return (
            f"Error fetching movies (HTTP {exc.upstream_status}). "
            "Please try again later."
        )
    if isinstance(exc, CatalogNetworkError):
        return NETWORK_MESSAGE
    if isinstance(exc, CatalogAuthError):
        return AUTH_NOT_CONFIGURED_MESSAGE
    return GENERIC_MESSAGE
