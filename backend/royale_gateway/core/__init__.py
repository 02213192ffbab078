"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import Settings, get_settings, get_global_settings
from .exceptions import (
    ServiceException,
    InvalidRequestError,
    ConfigurationError,
    ForbiddenScopeError,
    UpstreamFetchError,
)
from .tags import normalize_tag, same_tag, parse_tag_list
from .credentials import ResolvedCredential, resolve_credential

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_global_settings",
    # Exceptions
    "ServiceException",
    "InvalidRequestError",
    "ConfigurationError",
    "ForbiddenScopeError",
    "UpstreamFetchError",
    # Tags
    "normalize_tag",
    "same_tag",
    "parse_tag_list",
    # Credentials
    "ResolvedCredential",
    "resolve_credential",
]
