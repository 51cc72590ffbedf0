# src/telebugs_mcp/core/tracker/principals.py
"""Credential to principal resolution."""

import logging

from sqlalchemy import select

from telebugs_mcp.contracts.principal import Principal, PrincipalContext
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.schema import project_memberships_table, users_table

logger = logging.getLogger(__name__)


def resolve_principal(db: TrackerDB, api_key: str | None) -> PrincipalContext | None:
    """Resolve an API key to the active user it belongs to.

    Returns None when the key is empty or matches no active user. That is
    not an error: callers treat it as unauthenticated.

    Args:
        db: Tracker database
        api_key: Opaque credential presented by the client

    Returns:
        The principal with its full project membership set, or None
    """
    if not api_key:
        return None

    user = db.fetch_one(
        select(
            users_table.c.id,
            users_table.c.name,
            users_table.c.email_address,
            users_table.c.role,
        ).where(
            users_table.c.api_key == api_key,
            users_table.c.active.is_(True),
        )
    )
    if user is None:
        # Never log the key itself
        logger.warning("Rejected API key: no active user matches")
        return None

    memberships = db.fetch_all(select(project_memberships_table.c.project_id).where(project_memberships_table.c.user_id == user.id))

    return PrincipalContext(
        principal=Principal(
            id=user.id,
            name=user.name,
            email_address=user.email_address,
            role=user.role,
        ),
        project_ids=frozenset(row.project_id for row in memberships),
    )
