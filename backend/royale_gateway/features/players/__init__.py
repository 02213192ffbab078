"""Player batch projections feature."""

from .router import router as players_router
from .schemas import PlayerProjection, PlayerBatchResponse
from .service import PlayerBatchService
from .cache import (
    ProjectionCache,
    InMemoryProjectionCache,
    RedisProjectionCache,
    build_projection_cache,
)

__all__ = [
    "players_router",
    "PlayerProjection",
    "PlayerBatchResponse",
    "PlayerBatchService",
    "ProjectionCache",
    "InMemoryProjectionCache",
    "RedisProjectionCache",
    "build_projection_cache",
]
