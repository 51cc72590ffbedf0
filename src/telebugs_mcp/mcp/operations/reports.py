# src/telebugs_mcp/mcp/operations/reports.py
"""Report queries and report assembly.

A stored report is normalized across eight tables. ``get_report``
reassembles it into one nested document: exception chain with frames,
contexts, tags, breadcrumbs, and the optional request and end-user
snapshots. JSON text columns are parsed leniently (see
``formatters.lenient_json``) so one corrupt payload never hides the rest
of the report.
"""

from collections import defaultdict
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.engine import Row

from telebugs_mcp.contracts import ErrorResult, PrincipalContext, Severity
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.formatters import lenient_json
from telebugs_mcp.core.tracker.schema import (
    backtraces_table,
    breadcrumbs_table,
    contexts_table,
    frames_table,
    projects_table,
    report_users_table,
    reports_table,
    requests_table,
    tags_table,
)
from telebugs_mcp.core.tracker.scope import effective_scope
from telebugs_mcp.mcp.operations.common import check_ownership, in_scope
from telebugs_mcp.mcp.types import (
    BreadcrumbDetail,
    FrameDetail,
    ReportRecord,
    ReportResult,
    ReportsResult,
    ReportUserDetail,
    RequestDetail,
    StackTraceDetail,
)

_REPORT_COLUMNS = (
    reports_table.c.id,
    reports_table.c.project_id,
    projects_table.c.name.label("project_name"),
    reports_table.c.group_id,
    reports_table.c.error_type,
    reports_table.c.error_message,
    reports_table.c.culprit,
    reports_table.c.environment,
    reports_table.c.platform,
    reports_table.c.release_version,
    reports_table.c.server_name,
    reports_table.c.handled,
    reports_table.c.severity,
    reports_table.c.occurred_at,
    reports_table.c.log_message,
)

_REPORTS_WITH_PROJECT = reports_table.join(projects_table, projects_table.c.id == reports_table.c.project_id)


def _report_record(row: Row[Any]) -> ReportRecord:
    return {
        "id": row.id,
        "project_id": row.project_id,
        "project_name": row.project_name,
        "group_id": row.group_id,
        "error_type": row.error_type,
        "error_message": row.error_message,
        "culprit": row.culprit,
        "environment": row.environment,
        "platform": row.platform,
        "release": row.release_version,
        "server": row.server_name,
        "handled": bool(row.handled),
        "severity": Severity.from_code(row.severity).value,
        "occurred_at": row.occurred_at,
    }


def list_reports(
    db: TrackerDB,
    ctx: PrincipalContext,
    *,
    group_id: int | None = None,
    project_id: int | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> ReportsResult:
    """List reports in scope, most recent occurrence first.

    A ``group_id`` outside the scope simply matches nothing.
    """
    scope = effective_scope(ctx.project_ids, project_id)
    if not scope:
        return {"total_count": 0, "reports": []}

    conditions: list[Any] = [in_scope(reports_table.c.project_id, scope)]
    if group_id is not None:
        conditions.append(reports_table.c.group_id == group_id)
    if date_from:
        conditions.append(reports_table.c.occurred_at >= date_from)
    if date_to:
        conditions.append(reports_table.c.occurred_at <= date_to)

    total_count = db.fetch_count(select(func.count()).select_from(reports_table).where(*conditions))
    rows = db.fetch_all(
        select(*_REPORT_COLUMNS)
        .select_from(_REPORTS_WITH_PROJECT)
        .where(*conditions)
        .order_by(reports_table.c.occurred_at.desc(), reports_table.c.id.desc())
        .limit(limit)
        .offset(offset)
    )

    return {"total_count": total_count, "reports": [_report_record(row) for row in rows]}


def get_report(db: TrackerDB, ctx: PrincipalContext, report_id: int) -> ReportResult | ErrorResult:
    """Get one fully assembled report.

    Returns:
        The report document, or "Report not found" /
        "Access denied to this report"
    """
    row = db.fetch_one(select(*_REPORT_COLUMNS).select_from(_REPORTS_WITH_PROJECT).where(reports_table.c.id == report_id))
    failure = check_ownership(ctx, row, "report")
    if failure is not None:
        return failure
    assert row is not None

    return {
        "report": {
            **_report_record(row),
            "log_message": row.log_message,
            "stack_traces": _stack_traces(db, report_id),
            "contexts": _contexts(db, report_id),
            "tags": _tags(db, report_id),
            "breadcrumbs": _breadcrumbs(db, report_id),
            "request": _request(db, report_id),
            "user": _user(db, report_id),
        }
    }


# === Assembly ===


def _frame(row: Row[Any]) -> FrameDetail:
    return {
        "file": row.abs_path if row.abs_path is not None else row.filename,
        "function": row.function,
        "line": row.lineno,
        "column": row.colno,
        "context_line": row.context_line,
        "pre_context": lenient_json(row.pre_context),
        "post_context": lenient_json(row.post_context),
        "in_app": bool(row.in_app),
    }


def _stack_traces(db: TrackerDB, report_id: int) -> list[StackTraceDetail]:
    """Backtraces in storage order, each with frames in position order."""
    backtraces = db.fetch_all(
        select(backtraces_table).where(backtraces_table.c.report_id == report_id).order_by(backtraces_table.c.id)
    )
    if not backtraces:
        return []

    frames_by_backtrace: dict[int, list[FrameDetail]] = defaultdict(list)
    frame_rows = db.fetch_all(
        select(frames_table)
        .where(frames_table.c.backtrace_id.in_([bt.id for bt in backtraces]))
        .order_by(frames_table.c.backtrace_id, frames_table.c.position, frames_table.c.id)
    )
    for frame_row in frame_rows:
        frames_by_backtrace[frame_row.backtrace_id].append(_frame(frame_row))

    return [
        {
            "exception_type": bt.exception_type,
            "exception_module": bt.exception_module,
            "exception_value": bt.exception_value,
            "frames": frames_by_backtrace.get(bt.id, []),
        }
        for bt in backtraces
    ]


def _contexts(db: TrackerDB, report_id: int) -> dict[str, Any]:
    """Fold contexts into a name-keyed mapping. Last write wins; nameless rows are skipped."""
    rows = db.fetch_all(
        select(contexts_table.c.name, contexts_table.c.data)
        .where(contexts_table.c.report_id == report_id)
        .order_by(contexts_table.c.id)
    )
    return {row.name: lenient_json(row.data) for row in rows if row.name}


def _tags(db: TrackerDB, report_id: int) -> dict[str, str | None]:
    rows = db.fetch_all(
        select(tags_table.c.key, tags_table.c.value).where(tags_table.c.report_id == report_id).order_by(tags_table.c.id)
    )
    return {row.key: row.value for row in rows}


def _breadcrumbs(db: TrackerDB, report_id: int) -> list[BreadcrumbDetail]:
    rows = db.fetch_all(
        select(breadcrumbs_table)
        .where(breadcrumbs_table.c.report_id == report_id)
        .order_by(breadcrumbs_table.c.timestamp, breadcrumbs_table.c.id)
    )
    return [
        {
            "type": row.breadcrumb_type,
            "category": row.category,
            "level": row.level,
            "message": row.message,
            "data": lenient_json(row.data),
            "timestamp": row.timestamp,
        }
        for row in rows
    ]


def _request(db: TrackerDB, report_id: int) -> RequestDetail | None:
    row = db.fetch_one(select(requests_table).where(requests_table.c.report_id == report_id).order_by(requests_table.c.id))
    if row is None:
        return None
    return {
        "url": row.url,
        "method": row.method,
        "query_string": row.query_string,
        "headers": lenient_json(row.headers),
        "data": lenient_json(row.data),
    }


def _user(db: TrackerDB, report_id: int) -> ReportUserDetail | None:
    row = db.fetch_one(
        select(report_users_table).where(report_users_table.c.report_id == report_id).order_by(report_users_table.c.id)
    )
    if row is None:
        return None
    return {
        "id": row.user_id,
        "username": row.username,
        "email": row.email,
        "ip_address": row.ip_address,
        "geo": {
            "country": row.geo_country_code,
            "region": row.geo_region,
            "city": row.geo_city,
        },
    }
