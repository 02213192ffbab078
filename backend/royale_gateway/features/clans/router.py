"""Clan member endpoint."""

from typing import Any

from fastapi import APIRouter

from royale_gateway.core.dependencies import CredentialDep
from .dependencies import ClanServiceDep, ClanTagDep

router = APIRouter(prefix="/clans", tags=["clans"])


@router.get("/{tag}/members", response_model=None)
async def get_clan_members(
    clan_tag: ClanTagDep, credential: CredentialDep, service: ClanServiceDep
) -> Any:
    """
    List a clan's members.

    The upstream response is passed through as-is, whatever its JSON shape,
    including its error status and body when the lookup fails.

    Examples:
        GET /clans/%23ABC123/members
    """
    return await service.list_members(credential, clan_tag)
