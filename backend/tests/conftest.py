from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from royale_gateway.core.clash_api import ClashAPIClient
from royale_gateway.core.config import Settings
from royale_gateway.core.credentials import ResolvedCredential
from royale_gateway.core.dependencies import get_clash_client
from royale_gateway.main import create_app

SCOPE_CLAN = "#CLAN1"


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        clash_default_token="server-token",
        clash_scope_clan_tag="clan1",
        clash_api_base_url="https://upstream.test/v1",
        rate_limit_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def caller_credential():
    return ResolvedCredential(authorization="Bearer caller-token", is_default=False)


@pytest.fixture
def default_credential():
    return ResolvedCredential(
        authorization="Bearer server-token",
        is_default=True,
        scope_clan_tag=SCOPE_CLAN,
    )


def make_player(tag, trophies=5000, merge_tactics=2036, clan_tag=SCOPE_CLAN, name=None):
    """Raw player record in the upstream's shape."""
    player = {
        "tag": tag,
        "name": name or f"Player {tag}",
        "trophies": trophies,
        "progress": {},
    }
    if merge_tactics is not None:
        player["progress"]["AutoChess_2025_Dec"] = {"trophies": merge_tactics}
    if clan_tag is not None:
        player["clan"] = {"tag": clan_tag, "name": "Clan One"}
    return player


@pytest.fixture
def player_factory():
    return make_player


@pytest.fixture
def sample_player():
    """Sample player record for testing."""
    return {
        "tag": "#ABC123",
        "name": "TestPlayer",
        "trophies": 5000,
        "clan": {"tag": "#CLAN1", "name": "Clan One", "badgeId": 16000000},
        "progress": {
            "AutoChess_2025_Dec": {"trophies": 2036, "bestTrophies": 2100},
            "Other_2025": {"trophies": 10},
        },
    }


@pytest.fixture
def sample_clan_members():
    """Sample clan member list for testing."""
    return {
        "items": [
            {"tag": "#ABC123", "name": "TestPlayer", "role": "leader"},
            {"tag": "#DEF456", "name": "Second", "role": "member"},
        ],
        "paging": {"cursors": {}},
    }


@pytest.fixture
def clash_client():
    """Upstream client double injected in place of the real one."""
    return AsyncMock(spec=ClashAPIClient)


@pytest.fixture
def make_app(clash_client):
    """Build an app for the given settings with the upstream client mocked."""

    def factory(app_settings):
        app = create_app(app_settings)
        app.dependency_overrides[get_clash_client] = lambda: clash_client
        return app

    return factory


@pytest.fixture
def app(make_app, settings):
    return make_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
