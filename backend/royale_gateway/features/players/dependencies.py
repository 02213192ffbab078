"""Dependencies for the players feature.

Injects the upstream client, the shared projection cache and the response's
background task queue into the batch service.
"""

from typing import Annotated, List, Optional

from fastapi import BackgroundTasks, Depends, Query, Request

from royale_gateway.core.dependencies import ClashClientDep, SettingsDep
from royale_gateway.core.exceptions import InvalidRequestError
from royale_gateway.core.tags import parse_tag_list
from .cache import ProjectionCache
from .service import PlayerBatchService, check_batch_size


def get_requested_tags(
    settings: SettingsDep,
    tags: Annotated[
        Optional[str],
        Query(description="Comma-separated player tags, e.g. #ABC,#DEF"),
    ] = None,
) -> List[str]:
    """Canonical player tags from the ``tags`` query parameter.

    Runs ahead of credential resolution, so malformed or oversized batches
    are rejected even when the default credential is misconfigured.

    :param settings: Application settings holding the batch limit
    :param tags: Raw comma-separated list
    :returns: Tags in request order, duplicates kept
    :raises InvalidRequestError: Parameter missing, lists no usable tag, or too many tags
    """
    tag_list = parse_tag_list(tags)
    if not tag_list:
        raise InvalidRequestError(
            "Query parameter 'tags' must list at least one player tag",
            operation="get_player_projections",
        )
    check_batch_size(len(tag_list), settings.max_batch_size, operation="get_player_projections")
    return tag_list


def get_projection_cache(request: Request) -> ProjectionCache:
    """Get the process-wide projection cache created at app startup.

    :param request: Incoming request
    :returns: Projection cache
    """
    return request.app.state.projection_cache


ProjectionCacheDep = Annotated[ProjectionCache, Depends(get_projection_cache)]


async def get_player_batch_service(
    background_tasks: BackgroundTasks,
    client: ClashClientDep,
    cache: ProjectionCacheDep,
    settings: SettingsDep,
) -> PlayerBatchService:
    """Get player batch service instance.

    Cache stores are queued on the response's background tasks so they run
    after the response has been sent.

    :param background_tasks: Tasks run after the response
    :param client: Clash API client
    :param cache: Projection cache
    :param settings: Application settings
    :returns: Player batch service with injected dependencies
    """
    return PlayerBatchService(
        client,
        cache,
        defer=background_tasks.add_task,
        max_batch=settings.max_batch_size,
    )


# Type aliases for cleaner dependency injection
RequestedTagsDep = Annotated[List[str], Depends(get_requested_tags)]
PlayerBatchServiceDep = Annotated[PlayerBatchService, Depends(get_player_batch_service)]

__all__ = [
    "get_requested_tags",
    "get_projection_cache",
    "get_player_batch_service",
    "RequestedTagsDep",
    "PlayerBatchServiceDep",
    "ProjectionCacheDep",
]
