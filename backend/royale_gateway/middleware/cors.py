"""Uniform cross-origin policy for every gateway response."""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
import structlog

logger = structlog.get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


class CrossOriginMiddleware(BaseHTTPMiddleware):
    """Answers preflight requests and stamps CORS headers on all responses.

    Unhandled errors are turned into a generic 500 here, outside Starlette's
    server error middleware, so that they carry the headers too.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error while serving request",
                method=request.method,
                path=request.url.path,
            )
            response = JSONResponse(
                status_code=500,
                content={"error": "internal_error", "message": "Internal server error"},
            )

        response.headers.update(CORS_HEADERS)
        return response
