"""Clash Royale API constants."""

DEFAULT_BASE_URL = "https://proxy.royaleapi.dev/v1"

# Seasonal progress keys for the Merge Tactics mode, e.g. "AutoChess_2025_Dec"
MERGE_TACTICS_PREFIXES = ("AutoChess_",)

USER_AGENT = "RoyaleGateway/1.0"
