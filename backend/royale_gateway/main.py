"""Main FastAPI application for the Royale gateway."""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
import structlog

from royale_gateway import __version__
from royale_gateway.core import Settings, ServiceException, get_global_settings
from royale_gateway.core.clash_api import ClashAPIError
from royale_gateway.core.dependencies import get_app_settings
from royale_gateway.core.logging import setup_logging
from royale_gateway.features.clans import clans_router
from royale_gateway.features.players import players_router
from royale_gateway.features.players.cache import build_projection_cache
from royale_gateway.middleware import CrossOriginMiddleware, RequestLogMiddleware

logger = structlog.get_logger(__name__)


def _log_credential_configuration(settings: Settings) -> None:
    """Log whether callers without a token can be served."""
    if not settings.clash_default_token:
        logger.warning(
            "CLASH_DEFAULT_TOKEN not configured; requests without Authorization will fail",
        )
    elif not settings.clash_scope_clan_tag:
        logger.warning(
            "CLASH_SCOPE_CLAN_TAG not configured; default credential cannot be used",
        )
    else:
        logger.info(
            "Default credential configured",
            scope_clan=settings.clash_scope_clan_tag,
        )


async def service_exception_handler(
    request: Request, exc: ServiceException
) -> JSONResponse:
    """Translate gateway errors into their status codes."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Request rejected",
        path=request.url.path,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        error=str(exc),
        **exc.context,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.public_detail())


async def clash_api_exception_handler(request: Request, exc: ClashAPIError) -> Response:
    """Pass upstream failures through with their own status and body."""
    if exc.status_code is None:
        return JSONResponse(
            status_code=502,
            content={"error": "upstream_error", "message": "Upstream request failed"},
        )
    return Response(
        content=exc.body,
        status_code=exc.status_code,
        media_type=exc.content_type or "application/json",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the gateway application.

    :param settings: Settings to use instead of the process-wide instance
    :returns: Configured FastAPI app
    """
    settings = settings or get_global_settings()
    setup_logging(settings.log_level)

    projection_cache = build_projection_cache(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting up Royale gateway", version=__version__)
        _log_credential_configuration(settings)
        yield
        logger.info("Shutting down Royale gateway")
        close = getattr(projection_cache, "close", None)
        if close is not None:
            await close()

    app = FastAPI(
        title="Royale Gateway",
        description="""
        Edge gateway for the Clash Royale API.

        * **Clan members**: `GET /clans/{tag}/members`
        * **Player projections**: `GET /players?tags=#A,#B` (at most 50 tags)

        Send `Authorization: Bearer <token>` to use your own API token.
        Without it the server's default token is used, restricted to one clan.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.projection_cache = projection_cache
    app.dependency_overrides[get_app_settings] = lambda: settings

    # Configure rate limiter for FastAPI app
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ServiceException, service_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ClashAPIError, clash_api_exception_handler)  # type: ignore[arg-type]

    # Last added runs first: CORS wraps logging wraps rate limiting
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(CrossOriginMiddleware)

    app.include_router(clans_router)
    app.include_router(players_router)

    @app.get("/health", tags=["health"])
    async def health_check() -> Dict[str, Any]:
        """
        Health check endpoint.

        Reports liveness, version and whether the default credential is usable.
        """
        stats = getattr(projection_cache, "stats", None)
        return {
            "status": "healthy",
            "version": __version__,
            "default_credential": bool(
                settings.clash_default_token and settings.clash_scope_clan_tag
            ),
            "cache": stats() if stats is not None else {"backend": "redis"},
        }

    return app


app = create_app()
