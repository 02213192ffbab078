"""Per-request credential resolution.

A caller-supplied Authorization header always wins, so the clan restriction
never applies to an authenticated caller. Without one, the operator-configured
default token is used and access is scoped to a single clan.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from .config import Settings
from .exceptions import ConfigurationError
from .tags import normalize_tag, same_tag

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResolvedCredential:
    """Credential chosen for one request."""

    authorization: str
    is_default: bool
    scope_clan_tag: Optional[str] = None

    def allows_clan(self, clan_tag: Optional[str]) -> bool:
        """Whether a resource affiliated with ``clan_tag`` may be returned."""
        if not self.is_default:
            return True
        return same_tag(clan_tag, self.scope_clan_tag)

    def __repr__(self) -> str:
        return (
            f"ResolvedCredential(authorization='[REDACTED]', "
            f"is_default={self.is_default}, scope_clan_tag={self.scope_clan_tag!r})"
        )


def resolve_credential(
    authorization_header: Optional[str], settings: Settings
) -> ResolvedCredential:
    """
    Pick the credential for a request.

    :param authorization_header: Raw Authorization header value, if any
    :param settings: Process-wide settings holding the default token
    :returns: Resolved credential
    :raises ConfigurationError: If the default token or its clan is not configured
    """
    if authorization_header and authorization_header.strip():
        return ResolvedCredential(authorization=authorization_header, is_default=False)

    if not settings.clash_default_token:
        logger.error("Default credential requested but CLASH_DEFAULT_TOKEN is not set")
        raise ConfigurationError(
            "Default API token is not configured",
            service="CredentialResolver",
            operation="resolve_credential",
        )

    scope_clan_tag = normalize_tag(settings.clash_scope_clan_tag)
    if scope_clan_tag is None:
        logger.error("Default credential requested but CLASH_SCOPE_CLAN_TAG is not set")
        raise ConfigurationError(
            "Default credential clan scope is not configured",
            service="CredentialResolver",
            operation="resolve_credential",
        )

    return ResolvedCredential(
        authorization=f"Bearer {settings.clash_default_token}",
        is_default=True,
        scope_clan_tag=scope_clan_tag,
    )
