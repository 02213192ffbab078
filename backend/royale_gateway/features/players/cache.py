"""
Projection cache backends.

The batch service only sees the ``ProjectionCache`` protocol, so the store can
be an in-process TTL map or a shared Redis instance. Keys are canonical tags;
values are projections, never raw upstream payloads.
"""

from typing import Any, Callable, Dict, Optional, Protocol
import time

import redis.asyncio as redis
from redis.exceptions import RedisError
import structlog
from pydantic import ValidationError

from royale_gateway.core.cache import TTLCache
from royale_gateway.core.config import Settings
from .schemas import PlayerProjection

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 300


class ProjectionCache(Protocol):
    """Expiring tag -> projection store."""

    async def get(self, tag: str) -> Optional[PlayerProjection]: ...

    async def put(self, tag: str, projection: PlayerProjection) -> None: ...


class InMemoryProjectionCache:
    """Process-local projection cache backed by TTLCache."""

    def __init__(
        self,
        ttl: int = DEFAULT_TTL_SECONDS,
        maxsize: int = 5000,
        clock: Callable[[], float] = time.time,
    ):
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl, clock=clock)

    async def get(self, tag: str) -> Optional[PlayerProjection]:
        return self._cache.get(tag)

    async def put(self, tag: str, projection: PlayerProjection) -> None:
        self._cache.set(tag, projection)

    def stats(self) -> Dict[str, Any]:
        return self._cache.stats()


class RedisProjectionCache:
    """Shared projection cache using Redis key expiry for the TTL."""

    KEY_PREFIX = "projection:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl: int = DEFAULT_TTL_SECONDS,
        client: Optional[redis.Redis] = None,
    ):
        self.ttl = ttl
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")
            client = redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        self.redis = client

    def _key(self, tag: str) -> str:
        return f"{self.KEY_PREFIX}{tag}"

    async def get(self, tag: str) -> Optional[PlayerProjection]:
        """Get a projection; unreachable Redis or a corrupt entry reads as a miss."""
        try:
            cached = await self.redis.get(self._key(tag))
        except RedisError as e:
            logger.warning("Projection cache read failed", tag=tag, error=str(e))
            return None

        if not cached:
            return None

        try:
            return PlayerProjection.model_validate_json(cached)
        except ValidationError:
            logger.warning("Discarding unreadable projection cache entry", tag=tag)
            return None

    async def put(self, tag: str, projection: PlayerProjection) -> None:
        payload = projection.model_dump_json(by_alias=True, exclude_none=True)
        await self.redis.set(self._key(tag), payload, ex=self.ttl)

    async def close(self) -> None:
        await self.redis.aclose()


def build_projection_cache(settings: Settings) -> ProjectionCache:
    """Create the projection cache selected by configuration."""
    if settings.projection_cache_url:
        logger.info("Using Redis projection cache")
        return RedisProjectionCache(
            settings.projection_cache_url, ttl=settings.projection_cache_ttl_seconds
        )

    logger.info(
        "Using in-memory projection cache",
        ttl=settings.projection_cache_ttl_seconds,
        maxsize=settings.projection_cache_maxsize,
    )
    return InMemoryProjectionCache(
        ttl=settings.projection_cache_ttl_seconds,
        maxsize=settings.projection_cache_maxsize,
    )
