"""Core dependencies for FastAPI application."""

from collections.abc import AsyncGenerator
from typing import Annotated, Optional

from fastapi import Depends, Header

from .clash_api import ClashAPIClient
from .config import Settings, get_global_settings
from .credentials import ResolvedCredential, resolve_credential


def get_app_settings() -> Settings:
    """Process-wide read-only settings."""
    return get_global_settings()


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def get_clash_client(
    settings: SettingsDep,
) -> AsyncGenerator[ClashAPIClient, None]:
    """Get a Clash API client scoped to one request."""
    client = ClashAPIClient(
        base_url=settings.clash_api_base_url,
        timeout_seconds=settings.upstream_timeout_seconds,
    )
    await client.start_session()
    try:
        yield client
    finally:
        await client.close()


def get_credential(
    settings: SettingsDep,
    authorization: Annotated[Optional[str], Header()] = None,
) -> ResolvedCredential:
    """Resolve the caller's credential, falling back to the scoped default."""
    return resolve_credential(authorization, settings)


# Type aliases for cleaner dependency injection
ClashClientDep = Annotated[ClashAPIClient, Depends(get_clash_client)]
CredentialDep = Annotated[ResolvedCredential, Depends(get_credential)]

__all__ = [
    "get_app_settings",
    "get_clash_client",
    "get_credential",
    "SettingsDep",
    "ClashClientDep",
    "CredentialDep",
]
