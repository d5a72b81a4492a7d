"""
Shared error handling for the Model Catalog Gateway.

Every failure that reaches a client is expressed as a
``CatalogServiceException`` subclass. The exception carries a stable error
code, a human readable message, optional details and the HTTP status the
routing layer should answer with. Raw upstream payloads never go into
``details``.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class CatalogServiceException(Exception):
    """Base exception for catalog gateway services."""

    status_code: int = 400

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )

    def response_headers(self) -> Dict[str, str]:
        """Extra HTTP headers to send with the error response."""
        return {}


class AuthorizationError(CatalogServiceException):
    """Authorization-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class MisconfiguredError(CatalogServiceException):
    """A required setting (e.g. the upstream credential) is missing."""

    status_code = 500

    def __init__(self, setting: str, message: Optional[str] = None):
        super().__init__(
            "MISCONFIGURED",
            message or f"Server misconfiguration ({setting})",
            {"setting": setting},
        )


class UpstreamUnavailableError(CatalogServiceException):
    """Network failure or non-success status from the upstream catalog."""

    status_code = 502

    def __init__(self, message: str = "Upstream unavailable", upstream_status: Optional[int] = None):
        details: Dict[str, Any] = {}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        self.upstream_status = upstream_status
        super().__init__("UPSTREAM_UNAVAILABLE", message, details)


class UpstreamRateLimitedError(CatalogServiceException):
    """Upstream signalled rate limiting."""

    status_code = 429

    def __init__(self, retry_after: Optional[str] = None):
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"Upstream rate limit. Retry after {retry_after}s"
            details = {"retry_after": retry_after}
        else:
            message = "Upstream rate limit"
            details = {}
        super().__init__("UPSTREAM_RATE_LIMITED", message, details)

    def response_headers(self) -> Dict[str, str]:
        if self.retry_after is None:
            return {}
        return {"Retry-After": self.retry_after}


class UnexpectedUpstreamFormatError(CatalogServiceException):
    """Upstream answered with a payload we cannot interpret."""

    status_code = 502

    def __init__(self, message: str = "Unexpected upstream format"):
        super().__init__("UNEXPECTED_UPSTREAM_FORMAT", message)


class RateLimitError(CatalogServiceException):
    """Rate limiting errors."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_ERROR", message, details)
