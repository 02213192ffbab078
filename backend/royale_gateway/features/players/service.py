"""Batch player projection lookups.

Tags are resolved one at a time, in request order, cache first and upstream
on a miss. The first failure aborts the batch: callers get every projection
or none of them.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set

import structlog

from royale_gateway.core.clash_api import ClashAPIClient, ClashAPIError
from royale_gateway.core.credentials import ResolvedCredential
from royale_gateway.core.exceptions import (
    ForbiddenScopeError,
    InvalidRequestError,
    UpstreamFetchError,
)
from .cache import ProjectionCache
from .schemas import PlayerProjection
from .transformers import player_to_projection

logger = structlog.get_logger(__name__)

DEFAULT_MAX_BATCH = 50

# Schedules a coroutine function to run after the response, e.g. BackgroundTasks.add_task
Deferrer = Callable[..., Any]

_detached_tasks: Set["asyncio.Task[None]"] = set()


def run_detached(func: Callable[..., Awaitable[None]], *args: Any) -> None:
    """Fallback deferrer: run ``func`` as a task nobody awaits."""
    task = asyncio.get_running_loop().create_task(func(*args))
    _detached_tasks.add(task)
    task.add_done_callback(_detached_tasks.discard)


def check_batch_size(count: int, limit: int, operation: str) -> None:
    """Reject batches larger than ``limit`` before any lookup is made."""
    if count > limit:
        raise InvalidRequestError(
            f"Too many tags: {count} requested, at most {limit} allowed",
            service="PlayerBatchService",
            operation=operation,
            context={"count": count, "limit": limit},
        )


class PlayerBatchService:
    """Resolves ordered batches of player tags into projections."""

    def __init__(
        self,
        client: ClashAPIClient,
        cache: ProjectionCache,
        defer: Optional[Deferrer] = None,
        max_batch: int = DEFAULT_MAX_BATCH,
    ):
        """
        Initialize the batch service.

        :param client: Upstream API client
        :param cache: Projection cache
        :param defer: Schedules cache stores off the response path
        :param max_batch: Largest accepted batch
        """
        self._client = client
        self._cache = cache
        self._defer = defer or run_detached
        self.max_batch = max_batch

    async def resolve_batch(
        self,
        credential: ResolvedCredential,
        tags: Sequence[str],
        max_batch: Optional[int] = None,
    ) -> List[PlayerProjection]:
        """
        Resolve every tag, in order, or fail as a whole.

        :param credential: Resolved credential for this request
        :param tags: Canonical player tags in request order
        :param max_batch: Override for the batch size limit
        :returns: One projection per requested tag, in request order
        :raises InvalidRequestError: Empty or oversized batch
        :raises ForbiddenScopeError: A player outside the default credential's clan
        :raises UpstreamFetchError: An upstream lookup failed
        """
        limit = max_batch or self.max_batch
        if not tags:
            raise InvalidRequestError(
                "At least one player tag is required",
                service="PlayerBatchService",
                operation="resolve_batch",
            )
        check_batch_size(len(tags), limit, operation="resolve_batch")

        results: List[PlayerProjection] = []
        resolved: Dict[str, PlayerProjection] = {}
        hits = misses = 0

        for tag in tags:
            projection = resolved.get(tag)
            if projection is None:
                projection = await self._cache.get(tag)
                if projection is not None:
                    hits += 1
            if projection is not None:
                # Cached entries carry no record of who wrote them
                self._check_scope(credential, tag, projection)
            else:
                misses += 1
                projection = await self._fetch_projection(credential, tag)
                self._check_scope(credential, tag, projection)
                self._defer(self._store, tag, projection)

            resolved[tag] = projection
            results.append(projection)

        logger.info(
            "Player batch resolved",
            count=len(results),
            hits=hits,
            misses=misses,
            default_credential=credential.is_default,
        )
        return results

    async def _fetch_projection(
        self, credential: ResolvedCredential, tag: str
    ) -> PlayerProjection:
        try:
            player = await self._client.fetch_player(credential, tag)
        except ClashAPIError as e:
            logger.warning(
                "Aborting batch on upstream failure",
                tag=tag,
                status_code=e.status_code,
                error_type=type(e).__name__,
            )
            raise UpstreamFetchError(
                f"Upstream lookup failed for {tag}",
                tag=tag,
                upstream_status=e.status_code,
                service="PlayerBatchService",
                operation="resolve_batch",
                original_error=e,
            ) from e

        return player_to_projection(player, tag)

    @staticmethod
    def _check_scope(
        credential: ResolvedCredential, tag: str, projection: PlayerProjection
    ) -> None:
        if credential.allows_clan(projection.clan_tag):
            return

        logger.warning(
            "Default credential used outside its clan",
            tag=tag,
            player_clan=projection.clan_tag,
            scope_clan=credential.scope_clan_tag,
        )
        raise ForbiddenScopeError(
            f"Player {tag} is not a member of the clan the default credential is restricted to",
            tag=tag,
            scope_clan_tag=credential.scope_clan_tag,
            service="PlayerBatchService",
            operation="resolve_batch",
        )

    async def _store(self, tag: str, projection: PlayerProjection) -> None:
        """Best-effort cache write; failures are logged and dropped."""
        try:
            await self._cache.put(tag, projection)
        except Exception as e:
            logger.warning(
                "Projection cache store failed",
                tag=tag,
                error_type=type(e).__name__,
                error=str(e),
            )
