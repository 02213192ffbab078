"""Clan membership lookups."""

from typing import Any

import structlog

from royale_gateway.core.clash_api import ClashAPIClient
from royale_gateway.core.credentials import ResolvedCredential
from royale_gateway.core.exceptions import ForbiddenScopeError

logger = structlog.get_logger(__name__)


class ClanService:
    """Forwards clan member lookups, enforcing the default credential's scope."""

    def __init__(self, client: ClashAPIClient):
        self._client = client

    async def list_members(
        self, credential: ResolvedCredential, clan_tag: str
    ) -> Any:
        """
        Get a clan's member list in the upstream's own shape.

        The scope check runs before the upstream call, so a restricted
        credential never reaches the API for another clan.

        :param credential: Resolved credential for this request
        :param clan_tag: Canonical clan tag
        :returns: Upstream JSON, usually ``{"items": [...]}``
        :raises ForbiddenScopeError: Default credential used for another clan
        :raises ClashAPIError: Upstream returned a non-success status
        """
        if not credential.allows_clan(clan_tag):
            logger.warning(
                "Default credential used for another clan",
                clan_tag=clan_tag,
                scope_clan=credential.scope_clan_tag,
            )
            raise ForbiddenScopeError(
                f"The default credential may only list members of {credential.scope_clan_tag}",
                tag=clan_tag,
                scope_clan_tag=credential.scope_clan_tag,
                service="ClanService",
                operation="list_members",
            )

        members = await self._client.fetch_clan_members(credential, clan_tag)
        logger.debug(
            "Clan members fetched",
            clan_tag=clan_tag,
            member_count=len(members.get("items") or []) if isinstance(members, dict) else None,
        )
        return members
