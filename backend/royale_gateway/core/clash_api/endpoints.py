"""URL builders for the Clash Royale API."""

from urllib.parse import quote

from .constants import DEFAULT_BASE_URL


def encode_tag(tag: str) -> str:
    """Percent-encode a tag for a path segment, including the leading '#'."""
    return quote(tag, safe="")


class ClashAPIEndpoints:
    """Builds upstream URLs for the two supported lookups."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL):
        self.base_url = base_url.rstrip("/")

    def clan_members(self, clan_tag: str) -> str:
        return f"{self.base_url}/clans/{encode_tag(clan_tag)}/members"

    def player(self, player_tag: str) -> str:
        return f"{self.base_url}/players/{encode_tag(player_tag)}"
