"""
Gateway custom exceptions.

Each exception carries the HTTP status and error code the router maps it to.
Components raise these; only the router turns them into responses.
"""

from typing import Any, Dict, Optional


class ServiceException(Exception):
    """Base exception for all gateway errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.service = service
        self.operation = operation
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.service and self.operation:
            return f"[{self.service}.{self.operation}] {self.message}"
        return self.message

    def public_detail(self) -> Dict[str, Any]:
        """Body fields safe to return to the caller."""
        return {"error": self.error_code, "message": self.message}


class InvalidRequestError(ServiceException):
    """Malformed, missing or excessive input from the caller."""

    status_code = 400
    error_code = "invalid_request"


class ConfigurationError(ServiceException):
    """Operator misconfiguration. Never retried, never detailed to the caller."""

    status_code = 500
    error_code = "configuration_error"

    def public_detail(self) -> Dict[str, Any]:
        return {"error": self.error_code, "message": "Server configuration error"}


class ForbiddenScopeError(ServiceException):
    """Default credential used outside the clan it is restricted to."""

    status_code = 403
    error_code = "forbidden_scope"

    def __init__(
        self,
        message: str,
        tag: Optional[str] = None,
        scope_clan_tag: Optional[str] = None,
        service: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        context: Dict[str, Any] = {}
        if tag:
            context["tag"] = tag
        if scope_clan_tag:
            context["scope_clan_tag"] = scope_clan_tag
        super().__init__(
            message=message,
            service=service,
            operation=operation,
            context=context,
        )
        self.tag = tag

    def public_detail(self) -> Dict[str, Any]:
        detail = super().public_detail()
        detail["policy"] = "default_credential_clan_scope"
        if self.tag:
            detail["tag"] = self.tag
        return detail


class UpstreamFetchError(ServiceException):
    """A player lookup failed upstream, aborting the whole batch."""

    status_code = 502
    error_code = "upstream_error"

    def __init__(
        self,
        message: str,
        tag: str,
        upstream_status: Optional[int] = None,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            service=service,
            operation=operation,
            context={"tag": tag, "upstream_status": upstream_status},
            original_error=original_error,
        )
        self.tag = tag
        self.upstream_status = upstream_status

    def public_detail(self) -> Dict[str, Any]:
        detail = super().public_detail()
        detail["tag"] = self.tag
        detail["upstreamStatus"] = self.upstream_status
        return detail
