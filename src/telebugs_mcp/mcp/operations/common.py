# src/telebugs_mcp/mcp/operations/common.py
"""Predicates and checks shared by the operation modules."""

from collections.abc import Set
from typing import Any

from sqlalchemy import ColumnElement, and_, true
from sqlalchemy.engine import Row

from telebugs_mcp.contracts import ErrorResult, GroupStatus, PrincipalContext, access_denied, not_found
from telebugs_mcp.core.tracker.schema import groups_table


def in_scope(column: Any, scope: Set[int]) -> ColumnElement[bool]:
    """Scope membership predicate: one bound parameter per project id."""
    return column.in_(sorted(scope))


def status_condition(status: str) -> ColumnElement[bool]:
    """Translate a status filter into a predicate on the lifecycle timestamps.

    Mirrors ``GroupStatus.derive``: resolved wins over muted.
    """
    resolved_at = groups_table.c.resolved_at
    muted_at = groups_table.c.muted_at
    if status == GroupStatus.RESOLVED:
        return resolved_at.is_not(None)
    if status == GroupStatus.MUTED:
        return and_(muted_at.is_not(None), resolved_at.is_(None))
    if status == GroupStatus.OPEN:
        return and_(resolved_at.is_(None), muted_at.is_(None))
    return true()


def group_status(row: Row[Any]) -> str:
    return GroupStatus.derive(row.resolved_at, row.muted_at).value


def check_ownership(ctx: PrincipalContext, row: Row[Any] | None, entity: str) -> ErrorResult | None:
    """Existence before membership.

    Membership is tested against the full set, never a filtered scope.

    Returns:
        None when the row exists and belongs to a member project,
        otherwise the not-found or access-denied error result
    """
    if row is None:
        return not_found(entity.capitalize())
    if not ctx.can_access(row.project_id):
        return access_denied(entity)
    return None
