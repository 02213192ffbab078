import pytest
from unittest.mock import AsyncMock

from royale_gateway.core.clash_api import ClashAPIClient, NotFoundError
from royale_gateway.core.exceptions import (
    ForbiddenScopeError,
    InvalidRequestError,
    UpstreamFetchError,
)
from royale_gateway.features.players.cache import InMemoryProjectionCache
from royale_gateway.features.players.schemas import PlayerProjection
from royale_gateway.features.players.service import PlayerBatchService, check_batch_size


class DeferredCalls:
    """Collects deferred work instead of running it after a response."""

    def __init__(self):
        self.calls = []

    def __call__(self, func, *args):
        self.calls.append((func, args))

    async def run_all(self):
        for func, args in self.calls:
            await func(*args)


@pytest.fixture
def mock_client():
    return AsyncMock(spec=ClashAPIClient)


@pytest.fixture
def cache(clock):
    return InMemoryProjectionCache(ttl=300, clock=clock)


@pytest.fixture
def deferred():
    return DeferredCalls()


@pytest.fixture
def service(mock_client, cache, deferred):
    return PlayerBatchService(mock_client, cache, defer=deferred, max_batch=50)


def serve_players(mock_client, players):
    """Make fetch_player answer from a tag -> record mapping."""

    async def fetch_player(credential, tag):
        player = players[tag]
        if isinstance(player, Exception):
            raise player
        return player

    mock_client.fetch_player.side_effect = fetch_player


def fetched_tags(mock_client):
    return [call.args[1] for call in mock_client.fetch_player.call_args_list]


async def test_results_follow_request_order(
    service, mock_client, cache, caller_credential, player_factory
):
    """Order matches the request even with a mix of hits and misses"""
    tags = ["#C", "#A", "#B"]
    serve_players(mock_client, {tag: player_factory(tag) for tag in tags})
    await cache.put("#A", PlayerProjection(tag="#A", name="cached", clan_tag="#CLAN1"))

    result = await service.resolve_batch(caller_credential, tags)

    assert [p.tag for p in result] == tags
    assert result[1].name == "cached"
    assert fetched_tags(mock_client) == ["#C", "#B"]


async def test_misses_are_stored_after_the_fact(
    service, mock_client, cache, deferred, caller_credential, player_factory
):
    serve_players(mock_client, {"#A": player_factory("#A")})

    await service.resolve_batch(caller_credential, ["#A"])

    assert await cache.get("#A") is None
    await deferred.run_all()
    cached = await cache.get("#A")
    assert cached.trophy_road == 5000
    assert cached.merge_tactics == 2036


async def test_cache_hit_skips_upstream(
    service, mock_client, cache, caller_credential
):
    await cache.put("#A", PlayerProjection(tag="#A", trophy_road=1, clan_tag="#X"))

    result = await service.resolve_batch(caller_credential, ["#A"])

    assert result[0].trophy_road == 1
    mock_client.fetch_player.assert_not_called()


async def test_expired_entry_is_refetched(
    service, mock_client, cache, clock, caller_credential, player_factory
):
    serve_players(mock_client, {"#A": player_factory("#A", trophies=7000)})
    await cache.put("#A", PlayerProjection(tag="#A", trophy_road=1))
    clock.advance(300)

    result = await service.resolve_batch(caller_credential, ["#A"])

    assert result[0].trophy_road == 7000
    assert fetched_tags(mock_client) == ["#A"]


async def test_empty_batch_rejected(service, mock_client, caller_credential):
    with pytest.raises(InvalidRequestError):
        await service.resolve_batch(caller_credential, [])
    mock_client.fetch_player.assert_not_called()


async def test_oversized_batch_rejected_without_upstream_calls(
    service, mock_client, caller_credential
):
    tags = [f"#P{i}" for i in range(51)]

    with pytest.raises(InvalidRequestError) as exc_info:
        await service.resolve_batch(caller_credential, tags)

    assert "Too many tags" in exc_info.value.message
    mock_client.fetch_player.assert_not_called()


async def test_max_batch_boundary_accepted(
    service, mock_client, caller_credential, player_factory
):
    tags = [f"#P{i}" for i in range(50)]
    serve_players(mock_client, {tag: player_factory(tag) for tag in tags})

    result = await service.resolve_batch(caller_credential, tags)

    assert len(result) == 50


async def test_upstream_failure_aborts_batch(
    service, mock_client, deferred, caller_credential, player_factory
):
    """Third of five tags fails: 4 and 5 are never fetched"""
    tags = ["#T1", "#T2", "#T3", "#T4", "#T5"]
    players = {tag: player_factory(tag) for tag in tags}
    players["#T3"] = NotFoundError("Resource not found", status_code=404)
    serve_players(mock_client, players)

    with pytest.raises(UpstreamFetchError) as exc_info:
        await service.resolve_batch(caller_credential, tags)

    assert exc_info.value.tag == "#T3"
    assert exc_info.value.upstream_status == 404
    assert fetched_tags(mock_client) == ["#T1", "#T2", "#T3"]


async def test_default_credential_rejects_out_of_clan_player(
    service, mock_client, default_credential, player_factory
):
    """Earlier successes do not leak into a partial result"""
    serve_players(
        mock_client,
        {
            "#A": player_factory("#A"),
            "#B": player_factory("#B", clan_tag="#OTHER"),
            "#C": player_factory("#C"),
        },
    )

    with pytest.raises(ForbiddenScopeError) as exc_info:
        await service.resolve_batch(default_credential, ["#A", "#B", "#C"])

    assert exc_info.value.tag == "#B"
    assert fetched_tags(mock_client) == ["#A", "#B"]


async def test_default_credential_rejects_clanless_player(
    service, mock_client, default_credential, player_factory
):
    serve_players(mock_client, {"#A": player_factory("#A", clan_tag=None)})

    with pytest.raises(ForbiddenScopeError):
        await service.resolve_batch(default_credential, ["#A"])


async def test_scope_rechecked_on_cache_hit(
    service, mock_client, cache, default_credential
):
    """A projection cached by another caller is still scope-checked"""
    await cache.put("#A", PlayerProjection(tag="#A", clan_tag="#OTHER"))

    with pytest.raises(ForbiddenScopeError):
        await service.resolve_batch(default_credential, ["#A"])

    mock_client.fetch_player.assert_not_called()


async def test_out_of_clan_projection_is_not_stored(
    service, mock_client, deferred, default_credential, player_factory
):
    serve_players(mock_client, {"#A": player_factory("#A", clan_tag="#OTHER")})

    with pytest.raises(ForbiddenScopeError):
        await service.resolve_batch(default_credential, ["#A"])

    assert deferred.calls == []


async def test_default_credential_allows_clan_members(
    service, mock_client, default_credential, player_factory
):
    serve_players(mock_client, {"#A": player_factory("#A", clan_tag="#clan1")})

    result = await service.resolve_batch(default_credential, ["#A"])

    assert result[0].clan_tag == "#CLAN1"


async def test_duplicate_tags_fetched_once(
    service, mock_client, caller_credential, player_factory
):
    serve_players(mock_client, {"#A": player_factory("#A"), "#B": player_factory("#B")})

    result = await service.resolve_batch(caller_credential, ["#A", "#B", "#A"])

    assert [p.tag for p in result] == ["#A", "#B", "#A"]
    assert fetched_tags(mock_client) == ["#A", "#B"]


async def test_store_failure_is_swallowed(
    mock_client, deferred, caller_credential, player_factory
):
    failing_cache = AsyncMock()
    failing_cache.get.return_value = None
    failing_cache.put.side_effect = RuntimeError("cache down")
    service = PlayerBatchService(mock_client, failing_cache, defer=deferred)
    serve_players(mock_client, {"#A": player_factory("#A")})

    result = await service.resolve_batch(caller_credential, ["#A"])
    await deferred.run_all()

    assert result[0].tag == "#A"
    failing_cache.put.assert_awaited_once()


async def test_default_deferrer_runs_detached(
    mock_client, cache, caller_credential, player_factory
):
    import asyncio

    service = PlayerBatchService(mock_client, cache)
    serve_players(mock_client, {"#A": player_factory("#A")})

    await service.resolve_batch(caller_credential, ["#A"])
    for _ in range(3):
        await asyncio.sleep(0)

    assert await cache.get("#A") is not None


def test_check_batch_size_limit():
    check_batch_size(50, 50, operation="resolve_batch")
    with pytest.raises(InvalidRequestError) as exc_info:
        check_batch_size(51, 50, operation="resolve_batch")
    assert exc_info.value.context == {"count": 51, "limit": 50}
