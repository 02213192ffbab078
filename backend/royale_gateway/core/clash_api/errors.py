"""Custom error classes for the Clash Royale API client."""

from typing import Optional


class ClashAPIError(Exception):
    """Base exception for upstream API errors with status code tracking."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
        content_type: Optional[str] = None,
    ) -> None:
        """
        Initialize ClashAPIError.

        Args:
            message: Error message
            status_code: HTTP status code, None for transport failures
            body: Raw response body from the API
            content_type: Content-Type of the upstream response
        """
        super().__init__(message)
        self.status_code: Optional[int] = status_code
        self.body: str = body
        self.content_type: Optional[str] = content_type
        self.message: str = message

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.status_code:
            return f"Clash API Error {self.status_code}: {self.message}"
        return f"Clash API Error: {self.message}"


class BadRequestError(ClashAPIError):
    """Bad request (400) - invalid parameters."""

    pass


class AuthenticationError(ClashAPIError):
    """Authentication error (401) - missing or invalid API token."""

    pass


class ForbiddenError(ClashAPIError):
    """Forbidden error (403) - token not allowed, often an IP allow-list mismatch."""

    pass


class NotFoundError(ClashAPIError):
    """Not found error (404) - tag doesn't exist."""

    pass


class RateLimitError(ClashAPIError):
    """Rate limit error (429) - upstream throttled the token."""

    pass


class ServiceUnavailableError(ClashAPIError):
    """Service unavailable (503) - maintenance or upstream outage."""

    pass


STATUS_ERRORS = {
    400: (BadRequestError, "Invalid request parameters"),
    401: (AuthenticationError, "Invalid API token"),
    403: (ForbiddenError, "Access forbidden"),
    404: (NotFoundError, "Resource not found"),
    429: (RateLimitError, "Rate limit exceeded"),
    503: (ServiceUnavailableError, "Service unavailable"),
}


def error_for_status(
    status: int, body: str = "", content_type: Optional[str] = None
) -> ClashAPIError:
    """Build the ClashAPIError subclass matching an upstream status."""
    error_cls, message = STATUS_ERRORS.get(
        status, (ClashAPIError, f"Upstream error {status}")
    )
    return error_cls(message, status_code=status, body=body, content_type=content_type)
