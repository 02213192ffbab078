"""Clan membership feature."""

from .router import router as clans_router
from .service import ClanService

__all__ = ["clans_router", "ClanService"]
