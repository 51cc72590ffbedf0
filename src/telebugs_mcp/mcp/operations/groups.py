# src/telebugs_mcp/mcp/operations/groups.py
"""Error group queries: list_error_groups, get_error_group, search_errors.

Merged groups (``merged_into_id`` set) are hidden from listings and search
but remain reachable by id.
"""

from typing import Any

from sqlalchemy import Select, func, literal_column, select
from sqlalchemy.engine import Row

from telebugs_mcp.contracts import ErrorResult, PrincipalContext
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.formatters import escape_like, fts_phrase_query
from telebugs_mcp.core.tracker.schema import (
    group_search_index_table,
    groups_table,
    notes_table,
    projects_table,
    users_table,
)
from telebugs_mcp.core.tracker.scope import effective_scope
from telebugs_mcp.mcp.operations.common import check_ownership, group_status, in_scope, status_condition
from telebugs_mcp.mcp.types import ErrorGroupRecord, ErrorGroupResult, ErrorGroupsResult, SearchResult

NOTES_SHOWN = 10

_LISTING_COLUMNS = (
    groups_table.c.id,
    groups_table.c.project_id,
    projects_table.c.name.label("project_name"),
    groups_table.c.error_type,
    groups_table.c.error_message,
    groups_table.c.culprit,
    groups_table.c.reports_count,
    groups_table.c.first_occurred_at,
    groups_table.c.last_occurred_at,
    groups_table.c.resolved_at,
    groups_table.c.muted_at,
)

_MOST_RECENT_FIRST = (groups_table.c.last_occurred_at.desc(), groups_table.c.id.desc())


def _listing(conditions: list[Any]) -> Select[Any]:
    return (
        select(*_LISTING_COLUMNS)
        .select_from(groups_table.join(projects_table, projects_table.c.id == groups_table.c.project_id))
        .where(*conditions)
    )


def _group_record(row: Row[Any]) -> ErrorGroupRecord:
    return {
        "id": row.id,
        "project_id": row.project_id,
        "project_name": row.project_name,
        "error_type": row.error_type,
        "error_message": row.error_message,
        "culprit": row.culprit,
        "occurrences": row.reports_count,
        "first_seen": row.first_occurred_at,
        "last_seen": row.last_occurred_at,
        "status": group_status(row),
    }


def list_error_groups(
    db: TrackerDB,
    ctx: PrincipalContext,
    *,
    project_id: int | None = None,
    error_type: str | None = None,
    error_message: str | None = None,
    status: str = "open",
    date_from: str | None = None,
    date_to: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> ErrorGroupsResult:
    """List error groups in scope, most recently seen first.

    Args:
        db: Tracker database
        ctx: Calling principal
        project_id: Advisory project filter
        error_type: Exact error type
        error_message: Literal substring of the error message
        status: open, resolved, muted or all
        date_from: Inclusive lower bound on last occurrence
        date_to: Inclusive upper bound on last occurrence
        limit: Page size
        offset: Rows to skip

    Returns:
        ``total_count`` of all matches plus one page of groups
    """
    scope = effective_scope(ctx.project_ids, project_id)
    if not scope:
        return {"total_count": 0, "error_groups": []}

    conditions: list[Any] = [
        in_scope(groups_table.c.project_id, scope),
        groups_table.c.merged_into_id.is_(None),
        status_condition(status),
    ]
    if error_type:
        conditions.append(groups_table.c.error_type == error_type)
    if error_message:
        conditions.append(groups_table.c.error_message.like(f"%{escape_like(error_message)}%", escape="\\"))
    if date_from:
        conditions.append(groups_table.c.last_occurred_at >= date_from)
    if date_to:
        conditions.append(groups_table.c.last_occurred_at <= date_to)

    total_count = db.fetch_count(select(func.count()).select_from(groups_table).where(*conditions))
    rows = db.fetch_all(_listing(conditions).order_by(*_MOST_RECENT_FIRST).limit(limit).offset(offset))

    return {"total_count": total_count, "error_groups": [_group_record(row) for row in rows]}


def get_error_group(db: TrackerDB, ctx: PrincipalContext, group_id: int) -> ErrorGroupResult | ErrorResult:
    """Get one error group with attribution names and its most recent notes.

    Returns:
        The group detail, or "Error group not found" /
        "Access denied to this error group"
    """
    owner = users_table.alias("owner")
    resolver = users_table.alias("resolver")
    muter = users_table.alias("muter")

    row = db.fetch_one(
        select(
            groups_table,
            projects_table.c.name.label("project_name"),
            owner.c.name.label("owner_name"),
            resolver.c.name.label("resolver_name"),
            muter.c.name.label("muter_name"),
        )
        .select_from(
            groups_table.join(projects_table, projects_table.c.id == groups_table.c.project_id)
            .outerjoin(owner, owner.c.id == groups_table.c.owner_id)
            .outerjoin(resolver, resolver.c.id == groups_table.c.resolver_id)
            .outerjoin(muter, muter.c.id == groups_table.c.muter_id)
        )
        .where(groups_table.c.id == group_id)
    )
    failure = check_ownership(ctx, row, "error group")
    if failure is not None:
        return failure
    assert row is not None

    notes = db.fetch_all(
        select(
            notes_table.c.id,
            notes_table.c.content,
            notes_table.c.automated,
            users_table.c.name.label("author"),
            notes_table.c.created_at,
        )
        .select_from(notes_table.join(users_table, users_table.c.id == notes_table.c.user_id))
        .where(notes_table.c.group_id == group_id)
        .order_by(notes_table.c.created_at.desc(), notes_table.c.id.desc())
        .limit(NOTES_SHOWN)
    )

    return {
        "error_group": {
            "id": row.id,
            "project_id": row.project_id,
            "project_name": row.project_name,
            "error_type": row.error_type,
            "error_message": row.error_message,
            "culprit": row.culprit,
            "fingerprint": row.fingerprint,
            "occurrences": row.reports_count,
            "first_seen": row.first_occurred_at,
            "last_seen": row.last_occurred_at,
            "status": group_status(row),
            "resolved_at": row.resolved_at,
            "resolved_by": row.resolver_name,
            "muted_at": row.muted_at,
            "muted_until": row.muted_until,
            "muted_by": row.muter_name,
            "assigned_to": row.owner_name,
            "merged_into_id": row.merged_into_id,
            "notes_count": row.notes_count,
            "notes": [
                {
                    "id": note.id,
                    "content": note.content,
                    "automated": bool(note.automated),
                    "author": note.author,
                    "created_at": note.created_at,
                }
                for note in notes
            ],
        }
    }


def search_errors(
    db: TrackerDB,
    ctx: PrincipalContext,
    *,
    query: str,
    project_id: int | None = None,
    limit: int = 20,
    offset: int = 0,
) -> SearchResult:
    """Full-text search over error type, message and culprit.

    Each whitespace-separated term of ``query`` must match; terms are
    matched literally, never as FTS5 operators, except that a trailing ``*``
    makes a term a prefix match. A query with no terms matches nothing.
    """
    scope = effective_scope(ctx.project_ids, project_id)
    match = fts_phrase_query(query)
    if not scope or not match:
        return {"total_count": 0, "results": []}

    # MATCH against the table name searches every indexed column
    matching_ids = select(group_search_index_table.c.rowid).where(
        literal_column(group_search_index_table.name).op("MATCH")(match)
    )
    conditions: list[Any] = [
        in_scope(groups_table.c.project_id, scope),
        groups_table.c.merged_into_id.is_(None),
        groups_table.c.id.in_(matching_ids),
    ]

    total_count = db.fetch_count(select(func.count()).select_from(groups_table).where(*conditions))
    rows = db.fetch_all(_listing(conditions).order_by(*_MOST_RECENT_FIRST).limit(limit).offset(offset))

    return {
        "total_count": total_count,
        "results": [
            {
                "id": row.id,
                "project_id": row.project_id,
                "project_name": row.project_name,
                "error_type": row.error_type,
                "error_message": row.error_message,
                "culprit": row.culprit,
                "occurrences": row.reports_count,
                "last_seen": row.last_occurred_at,
                "status": group_status(row),
            }
            for row in rows
        ],
    }
