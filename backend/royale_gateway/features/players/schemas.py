"""Pydantic schemas for player projections."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlayerProjection(BaseModel):
    """The small derived subset of a player record the gateway exposes."""

    tag: str = Field(..., description="Canonical player tag, e.g. #ABC123")
    name: Optional[str] = Field(None, description="Display name")
    trophy_road: Optional[int] = Field(
        None, alias="trophyRoad", description="Trophy Road trophies"
    )
    merge_tactics: Optional[int] = Field(
        None, alias="mergeTactics", description="Current Merge Tactics season trophies"
    )
    clan_tag: Optional[str] = Field(
        None, alias="clanTag", description="Canonical tag of the player's clan"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PlayerBatchResponse(BaseModel):
    """Projections for a batch, in request order."""

    items: list[PlayerProjection]
