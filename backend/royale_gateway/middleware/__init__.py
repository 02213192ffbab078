"""
Middleware package for cross-origin policy and request logging.
"""

from .cors import CORS_HEADERS, CrossOriginMiddleware
from .request_log import RequestLogMiddleware

__all__ = [
    "CORS_HEADERS",
    "CrossOriginMiddleware",
    "RequestLogMiddleware",
]
