# src/telebugs_mcp/core/tracker/__init__.py
"""Tracker: access to the Telebugs error-tracking database.

Primary API:
    TrackerDB - Connection management and storage primitives
    resolve_principal - API key to principal + project membership
    effective_scope - Advisory project filter against membership
"""

from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.principals import resolve_principal
from telebugs_mcp.core.tracker.scope import effective_scope

__all__ = [
    "TrackerDB",
    "effective_scope",
    "resolve_principal",
]
