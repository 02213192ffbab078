"""Dependencies for the clans feature."""

from typing import Annotated

from fastapi import Depends, Path

from royale_gateway.core.dependencies import ClashClientDep
from royale_gateway.core.exceptions import InvalidRequestError
from royale_gateway.core.tags import normalize_tag
from .service import ClanService


def get_clan_tag(tag: Annotated[str, Path(description="Clan tag, e.g. #ABC123")]) -> str:
    """Canonical clan tag from the path.

    :param tag: Raw path segment
    :returns: Canonical tag
    :raises InvalidRequestError: Tag is blank once normalized
    """
    clan_tag = normalize_tag(tag)
    if clan_tag is None:
        raise InvalidRequestError("Invalid clan tag", operation="get_clan_members")
    return clan_tag


async def get_clan_service(client: ClashClientDep) -> ClanService:
    """Get clan service instance.

    :param client: Clash API client
    :returns: Clan service
    """
    return ClanService(client)


ClanTagDep = Annotated[str, Depends(get_clan_tag)]
ClanServiceDep = Annotated[ClanService, Depends(get_clan_service)]

__all__ = ["get_clan_tag", "get_clan_service", "ClanTagDep", "ClanServiceDep"]
