"""Transformers from raw Clash Royale player records to projections.

Only finite numbers make it into a projection. Anything else is left
absent rather than zero-filled.
"""

import math
from typing import Any, Dict, Optional

from royale_gateway.core.clash_api.constants import MERGE_TACTICS_PREFIXES
from royale_gateway.core.tags import normalize_tag
from .schemas import PlayerProjection


def finite_int(value: Any) -> Optional[int]:
    """Return ``value`` as an int if it is a finite number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def get_merge_tactics(player: Dict[str, Any]) -> Optional[int]:
    """
    Pick the Merge Tactics trophies from a player's seasonal progress.

    :param player: Raw player record
    :returns: Trophies of the first seasonal entry with a finite value, or None
    """
    progress = player.get("progress")
    if not isinstance(progress, dict):
        return None

    for key, value in progress.items():
        if isinstance(key, str) and key.startswith(MERGE_TACTICS_PREFIXES):
            trophies = finite_int(value.get("trophies")) if isinstance(value, dict) else None
            if trophies is not None:
                return trophies

    return None


def player_to_projection(player: Dict[str, Any], requested_tag: str) -> PlayerProjection:
    """
    Derive a PlayerProjection from a raw player record.

    :param player: Raw player record from the API
    :param requested_tag: Canonical tag the record was fetched for
    :returns: Player projection
    """
    clan = player.get("clan")
    clan_tag = normalize_tag(clan.get("tag")) if isinstance(clan, dict) else None
    name = player.get("name")

    return PlayerProjection(
        tag=normalize_tag(player.get("tag")) or requested_tag,
        name=name if isinstance(name, str) else None,
        trophy_road=finite_int(player.get("trophies")),
        merge_tactics=get_merge_tactics(player),
        clan_tag=clan_tag,
    )
