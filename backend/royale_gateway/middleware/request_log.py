"""Request logging middleware."""

import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
import structlog
from structlog import contextvars as structlog_contextvars

logger = structlog.get_logger(__name__)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Logs each request with its status and duration."""

    slow_request_threshold: float = 2.0  # seconds

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.time()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]

        structlog_contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
            duration = time.time() - start_time

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000),
            )
            if duration > self.slow_request_threshold:
                logger.warning(
                    "Slow request detected",
                    duration_seconds=round(duration, 3),
                    threshold=self.slow_request_threshold,
                    path=request.url.path,
                )

            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            structlog_contextvars.unbind_contextvars("request_id")
