"""Clash Royale API HTTP client.

Issues exactly one outbound request per lookup. Failed calls are not retried;
retry policy belongs to the caller.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
import structlog

from royale_gateway.core.config import get_global_settings
from royale_gateway.core.credentials import ResolvedCredential
from .constants import USER_AGENT
from .endpoints import ClashAPIEndpoints
from .errors import ClashAPIError, error_for_status

logger = structlog.get_logger(__name__)


class ClashAPIClient:
    """Async client for the clan members and player endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root (uses config if None)
            timeout_seconds: Per-request timeout (uses config if None)
            transport: Optional httpx transport, mainly for tests
        """
        if base_url is None or timeout_seconds is None:
            settings = get_global_settings()
            base_url = base_url or settings.clash_api_base_url
            timeout_seconds = timeout_seconds or settings.upstream_timeout_seconds
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.endpoints = ClashAPIEndpoints(self.base_url)
        self._transport = transport

        # HTTP session
        self.session: Optional[httpx.AsyncClient] = None
        self._session_lock = asyncio.Lock()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def start_session(self) -> httpx.AsyncClient:
        """Start the httpx session if needed and return it."""
        if self.session is None or self.session.is_closed:
            async with self._session_lock:
                if self.session is None or self.session.is_closed:
                    # One request in flight at a time per gateway request
                    limits = httpx.Limits(max_keepalive_connections=1, max_connections=1)
                    self.session = httpx.AsyncClient(
                        headers={
                            "Accept": "application/json",
                            "User-Agent": USER_AGENT,
                        },
                        timeout=httpx.Timeout(self.timeout_seconds),
                        limits=limits,
                        transport=self._transport,
                    )
                    logger.debug("Clash API client session started", base_url=self.base_url)
        return self.session

    async def close(self) -> None:
        """Close the httpx session."""
        if self.session and not self.session.is_closed:
            await self.session.aclose()
            logger.debug("Clash API client session closed")

    async def _get(self, url: str, credential: ResolvedCredential) -> Any:
        """
        Perform a single GET with the credential attached.

        Raises:
            ClashAPIError: For non-success responses and transport failures
        """
        session = await self.start_session()

        try:
            response = await session.get(
                url, headers={"Authorization": credential.authorization}
            )
        except httpx.RequestError as e:
            logger.warning(
                "Clash API request failed",
                url=url,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise ClashAPIError(f"Request failed: {type(e).__name__}") from e

        if not response.is_success:
            logger.info(
                "Clash API returned error status",
                url=url,
                status_code=response.status_code,
                default_credential=credential.is_default,
            )
            raise error_for_status(
                response.status_code,
                body=response.text,
                content_type=response.headers.get("Content-Type"),
            )

        try:
            return response.json()
        except ValueError as e:
            raise ClashAPIError("Upstream returned a non-JSON body") from e

    async def fetch_clan_members(
        self, credential: ResolvedCredential, clan_tag: str
    ) -> Any:
        """Get the member list of a clan, in the upstream's own shape."""
        url = self.endpoints.clan_members(clan_tag)
        return await self._get(url, credential)

    async def fetch_player(
        self, credential: ResolvedCredential, player_tag: str
    ) -> Dict[str, Any]:
        """Get the raw player record for a tag."""
        url = self.endpoints.player(player_tag)
        data = await self._get(url, credential)
        if not isinstance(data, dict):
            raise ClashAPIError(
                f"Expected object response for player, got {type(data).__name__}"
            )
        return data
