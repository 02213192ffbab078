"""
Clash Royale API client package.

Thin HTTP client for the clan members and player endpoints, with typed errors.
"""

from .client import ClashAPIClient
from .endpoints import ClashAPIEndpoints, encode_tag
from .errors import (
    ClashAPIError,
    BadRequestError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    error_for_status,
)

__all__ = [
    "ClashAPIClient",
    "ClashAPIEndpoints",
    "encode_tag",
    "ClashAPIError",
    "BadRequestError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitError",
    "ServiceUnavailableError",
    "error_for_status",
]
