"""
Royale Gateway Application Package.

Edge gateway between a browser client and the Clash Royale API: clan member
lookups and cached batch player projections.
"""

__version__ = "1.0.0"
__author__ = "Royale Gateway Team"
