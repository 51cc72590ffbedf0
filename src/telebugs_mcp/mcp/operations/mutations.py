# src/telebugs_mcp/mcp/operations/mutations.py
"""Error group lifecycle transitions: resolve, unresolve, mute, unmute.

Every transition checks, in order: the group exists, the caller is a
member of its project, the current state allows the transition. The state
guard is then repeated in the UPDATE's WHERE clause. If another writer
changed the state between the read and the write, the UPDATE matches no
row and the caller gets the same invalid-state error it would have got
had it read the newer state.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, and_, select, update
from sqlalchemy.engine import Row

from telebugs_mcp.contracts import ErrorResult, GroupStatus, PrincipalContext, invalid_state
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.formatters import utc_timestamp
from telebugs_mcp.core.tracker.schema import groups_table
from telebugs_mcp.mcp.operations.common import check_ownership
from telebugs_mcp.mcp.types import GroupMutationResult

logger = logging.getLogger(__name__)

ALREADY_RESOLVED = "Error group is already resolved"
NOT_RESOLVED = "Error group is not resolved"
CANNOT_MUTE_RESOLVED = "Cannot mute a resolved error group"
ALREADY_MUTED = "Error group is already muted"
NOT_MUTED = "Error group is not muted"


@dataclass(frozen=True, slots=True)
class _Transition:
    """A lifecycle transition.

    ``rejection`` inspects the current row and names why the transition is
    not allowed (None when it is). ``guard`` is the same rule as a SQL
    predicate, evaluated inside the UPDATE.
    """

    name: str
    rejection: Callable[[Row[Any]], str | None]
    guard: ColumnElement[bool]
    result_status: GroupStatus
    # Reported when a concurrent writer wins but the re-read state would
    # allow the transition again (the state flipped twice)
    lost_race: str


def _reject_resolve(row: Row[Any]) -> str | None:
    return ALREADY_RESOLVED if row.resolved_at is not None else None


def _reject_unresolve(row: Row[Any]) -> str | None:
    return NOT_RESOLVED if row.resolved_at is None else None


def _reject_mute(row: Row[Any]) -> str | None:
    if row.resolved_at is not None:
        return CANNOT_MUTE_RESOLVED
    if row.muted_at is not None:
        return ALREADY_MUTED
    return None


def _reject_unmute(row: Row[Any]) -> str | None:
    return NOT_MUTED if row.muted_at is None else None


_RESOLVE = _Transition(
    "resolve", _reject_resolve, groups_table.c.resolved_at.is_(None), GroupStatus.RESOLVED, ALREADY_RESOLVED
)
_UNRESOLVE = _Transition(
    "unresolve", _reject_unresolve, groups_table.c.resolved_at.is_not(None), GroupStatus.OPEN, NOT_RESOLVED
)
_MUTE = _Transition(
    "mute",
    _reject_mute,
    and_(groups_table.c.resolved_at.is_(None), groups_table.c.muted_at.is_(None)),
    GroupStatus.MUTED,
    ALREADY_MUTED,
)
_UNMUTE = _Transition("unmute", _reject_unmute, groups_table.c.muted_at.is_not(None), GroupStatus.OPEN, NOT_MUTED)


def _load_lifecycle(db: TrackerDB, group_id: int) -> Row[Any] | None:
    return db.fetch_one(
        select(
            groups_table.c.id,
            groups_table.c.project_id,
            groups_table.c.resolved_at,
            groups_table.c.muted_at,
        ).where(groups_table.c.id == group_id)
    )


def _apply(
    db: TrackerDB,
    ctx: PrincipalContext,
    group_id: int,
    transition: _Transition,
    values: dict[str, Any],
) -> GroupMutationResult | ErrorResult:
    row = _load_lifecycle(db, group_id)
    failure = check_ownership(ctx, row, "error group")
    if failure is not None:
        return failure
    assert row is not None

    reason = transition.rejection(row)
    if reason is not None:
        return invalid_state(reason)

    affected = db.execute_write(
        update(groups_table).where(groups_table.c.id == group_id, transition.guard).values(**values)
    )
    if affected == 0:
        # Lost a race with a concurrent writer: report the state it left behind
        current = _load_lifecycle(db, group_id)
        failure = check_ownership(ctx, current, "error group")
        if failure is not None:
            return failure
        assert current is not None
        return invalid_state(transition.rejection(current) or transition.lost_race)

    logger.info(
        "Error group %s: %s by user %s",
        group_id,
        transition.name,
        ctx.principal.id,
    )
    return {"success": True, "group_id": group_id, "status": transition.result_status.value}


def resolve_error_group(db: TrackerDB, ctx: PrincipalContext, group_id: int) -> GroupMutationResult | ErrorResult:
    """Mark a group resolved. Mute state is left untouched."""
    now = utc_timestamp()
    return _apply(db, ctx, group_id, _RESOLVE, {"resolved_at": now, "resolver_id": ctx.principal.id, "updated_at": now})


def unresolve_error_group(db: TrackerDB, ctx: PrincipalContext, group_id: int) -> GroupMutationResult | ErrorResult:
    """Reopen a resolved group.

    The reported status is "open" even when an older mute is still set.
    """
    return _apply(
        db,
        ctx,
        group_id,
        _UNRESOLVE,
        {"resolved_at": None, "resolver_id": None, "updated_at": utc_timestamp()},
    )


def mute_error_group(
    db: TrackerDB,
    ctx: PrincipalContext,
    group_id: int,
    muted_until: str | None = None,
) -> GroupMutationResult | ErrorResult:
    """Mute an open group, optionally until a given time."""
    now = utc_timestamp()
    result = _apply(
        db,
        ctx,
        group_id,
        _MUTE,
        {"muted_at": now, "muter_id": ctx.principal.id, "muted_until": muted_until, "updated_at": now},
    )
    if "error" in result:
        return result
    return {**result, "muted_until": muted_until}


def unmute_error_group(db: TrackerDB, ctx: PrincipalContext, group_id: int) -> GroupMutationResult | ErrorResult:
    return _apply(
        db,
        ctx,
        group_id,
        _UNMUTE,
        {"muted_at": None, "muted_until": None, "muter_id": None, "updated_at": utc_timestamp()},
    )
